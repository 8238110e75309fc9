# ─────────────────────────────────────────────────────────────────────────────
# Delivery Protocol — interface every email provider wrapper satisfies
# ─────────────────────────────────────────────────────────────────────────────
# Implementations raise DeliveryError on any failure, so the pipeline never
# needs to know which provider is behind the sender.
# ─────────────────────────────────────────────────────────────────────────────

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class OutgoingEmail:
    """A single HTML email ready to hand to a provider."""

    sender: str
    to: str
    subject: str
    html: str
    reply_to: str | None = None


@runtime_checkable
class EmailSender(Protocol):
    """Sends an OutgoingEmail (e.g., Resend API, SMTP relay)."""

    @property
    def name(self) -> str: ...

    async def send(self, email: OutgoingEmail) -> None: ...

    async def aclose(self) -> None: ...
