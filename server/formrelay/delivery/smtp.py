# SMTP relay sender. smtplib blocks, so each send runs in the default executor.


import asyncio
import smtplib
import ssl
from email.message import EmailMessage

import structlog

from formrelay.delivery.protocol import OutgoingEmail
from formrelay.exceptions import DeliveryError

logger = structlog.get_logger(__name__)


class SmtpSender:
    """Sends email through an SMTP relay (e.g., Gmail with an app password).

    secure=True connects with implicit TLS (port 465); secure=False connects
    in plain text and upgrades with STARTTLS (port 587).
    """

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: str = "",
        password: str = "",
        secure: bool = True,
        timeout_seconds: float = 20.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._secure = secure
        self._timeout = timeout_seconds
        if not username or not password:
            logger.warning("smtp_credentials_missing", host=host, hint="Sending without AUTH")

    async def send(self, email: OutgoingEmail) -> None:
        message = build_message(email)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_blocking, message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(self.name, f"{type(e).__name__}: {e}") from e
        logger.debug("smtp_accepted", to=email.to, host=self._host)

    def _send_blocking(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        server: smtplib.SMTP
        if self._secure:
            server = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        with server:
            if not self._secure:
                server.starttls(context=context)
            if self._username and self._password:
                server.login(self._username, self._password)
            server.send_message(message)

    async def aclose(self) -> None:
        # One connection per send; nothing held open.
        return None


def build_message(email: OutgoingEmail) -> EmailMessage:
    """MIME message with a plain-text stub and the HTML body as alternative."""
    message = EmailMessage()
    message["From"] = email.sender
    message["To"] = email.to
    message["Subject"] = " ".join(email.subject.splitlines())
    if email.reply_to:
        message["Reply-To"] = email.reply_to
    message.set_content("This message requires an HTML-capable email client.")
    message.add_alternative(email.html, subtype="html")
    return message
