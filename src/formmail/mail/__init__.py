"""Notification mail: payload, composition and transports."""

from formmail.mail.compose import DEFAULT_SUBJECT, compose_mail
from formmail.mail.payload import MailPayload
from formmail.mail.transport import MailTransport, MemoryTransport, SmtpTransport, build_message

__all__ = [
    "DEFAULT_SUBJECT",
    "MailPayload",
    "MailTransport",
    "MemoryTransport",
    "SmtpTransport",
    "build_message",
    "compose_mail",
]
