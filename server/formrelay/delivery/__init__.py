"""Email delivery — sender Protocol, provider wrappers, and factory."""

from formrelay.delivery.factory import build_sender
from formrelay.delivery.protocol import EmailSender, OutgoingEmail
from formrelay.delivery.resend import ResendSender
from formrelay.delivery.smtp import SmtpSender

__all__ = [
    "EmailSender",
    "OutgoingEmail",
    "ResendSender",
    "SmtpSender",
    "build_sender",
]
