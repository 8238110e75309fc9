# ─────────────────────────────────────────────────────────────────────────────
# Sender Factory — picks the delivery provider from settings
# ─────────────────────────────────────────────────────────────────────────────


import structlog

from formrelay.config import Settings
from formrelay.delivery.protocol import EmailSender
from formrelay.delivery.resend import ResendSender
from formrelay.delivery.smtp import SmtpSender

logger = structlog.get_logger(__name__)

PROVIDERS: frozenset[str] = frozenset({"resend", "smtp"})


def build_sender(settings: Settings) -> EmailSender:
    """Construct the configured EmailSender. Raises ValueError for unknown providers."""
    provider = settings.email_provider.strip().lower()
    if provider not in PROVIDERS:
        raise ValueError(
            f"Unknown EMAIL_PROVIDER '{settings.email_provider}'. Expected one of: {sorted(PROVIDERS)}"
        )

    sender: EmailSender
    if provider == "resend":
        sender = ResendSender(
            settings.resend_api_key.get_secret_value(),
            base_url=settings.resend_api_url,
            timeout_seconds=settings.email_timeout_seconds,
        )
    else:
        sender = SmtpSender(
            settings.smtp_host,
            settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_pass.get_secret_value(),
            secure=settings.smtp_secure,
            timeout_seconds=settings.email_timeout_seconds,
        )

    logger.info("email_sender_configured", provider=sender.name)
    return sender
