"""Mail transports — deliver a ``MailPayload``.

A transport is any object with ``send(payload) -> None`` that raises
``MailTransportError`` when delivery fails. Two are provided:

- ``SmtpTransport`` talks to an SMTP server using ``smtplib``.
- ``MemoryTransport`` keeps messages in a list, for tests and dry runs.
"""

import logging
import re
import smtplib
import ssl
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol, runtime_checkable

from formmail.config import SmtpConfig
from formmail.errors import MailTransportError
from formmail.mail.payload import MailPayload

logger = logging.getLogger("formmail.mail")

# Last-resort sender when neither the config nor the submission has one
FALLBACK_FROM_EMAIL = "no-reply@example.com"

_LINE_BREAKS_RE = re.compile(r"[\r\n]+")


@runtime_checkable
class MailTransport(Protocol):
    """Anything that can deliver a payload.

    Implementations raise ``MailTransportError`` on failure.
    """

    def send(self, payload: MailPayload) -> None: ...


# ---------------------------------------------------------------------------
# SMTP
# ---------------------------------------------------------------------------


def build_message(payload: MailPayload, config: SmtpConfig) -> EmailMessage:
    """Multipart/alternative message: text part first, HTML second."""
    from_email = config.from_email or payload.reply_to_email or FALLBACK_FROM_EMAIL

    message = EmailMessage()
    message["Subject"] = _single_line(payload.subject)
    message["From"] = formataddr((config.from_name, from_email))
    message["To"] = ", ".join(payload.to)
    if payload.reply_to_email:
        message["Reply-To"] = formataddr((_single_line(payload.reply_to_name or ""), payload.reply_to_email))
    message.set_content(payload.text_body)
    message.add_alternative(payload.html_body, subtype="html")
    return message


def _single_line(text: str) -> str:
    """Fold line breaks into spaces; header values must stay on one line."""
    return _LINE_BREAKS_RE.sub(" ", text).strip()


class SmtpTransport:
    """Send through an SMTP server.

    ``encryption="ssl"`` connects with implicit TLS, ``"tls"`` upgrades a
    plain connection with STARTTLS, ``""`` stays in the clear. Credentials
    are only sent when ``config.auth`` is set. A new connection is opened
    for every message.
    """

    __slots__ = ("config",)

    def __init__(self, config: SmtpConfig | None = None) -> None:
        self.config = config or SmtpConfig()

    def send(self, payload: MailPayload) -> None:
        try:
            message = build_message(payload, self.config)
            with self._connect() as smtp:
                if self.config.encryption == "tls":
                    smtp.starttls(context=ssl.create_default_context())
                if self.config.auth:
                    smtp.login(self.config.username, self.config.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            msg = f"SMTP delivery via {self.config.host}:{self.config.port} failed: {exc}"
            raise MailTransportError(msg) from exc

        logger.debug(
            "Sent %r to %d recipient(s) via %s:%d",
            payload.subject,
            len(payload.to),
            self.config.host,
            self.config.port,
        )

    def _connect(self) -> smtplib.SMTP:
        cfg = self.config
        if cfg.encryption == "ssl":
            return smtplib.SMTP_SSL(
                cfg.host, cfg.port, timeout=cfg.timeout, context=ssl.create_default_context()
            )
        return smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout)


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MemoryTransport:
    """Collects payloads in ``outbox`` instead of sending them.

    Set ``fail_with`` to make every ``send()`` raise
    ``MailTransportError`` chained from that exception::

        transport = MemoryTransport(fail_with=ConnectionRefusedError("down"))
    """

    outbox: list[MailPayload] = field(default_factory=list)
    fail_with: BaseException | None = None

    def send(self, payload: MailPayload) -> None:
        if self.fail_with is not None:
            msg = f"Delivery failed: {self.fail_with}"
            raise MailTransportError(msg) from self.fail_with
        self.outbox.append(payload)
