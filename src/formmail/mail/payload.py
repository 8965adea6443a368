"""MailPayload — everything a transport needs to send one notification."""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MailPayload:
    """A composed message. Immutable; recipients are stored as a tuple."""

    to: tuple[str, ...]
    subject: str
    html_body: str
    text_body: str
    reply_to_email: str | None = None
    reply_to_name: str | None = None

    def __init__(
        self,
        to: Iterable[str],
        subject: str,
        html_body: str,
        text_body: str,
        reply_to_email: str | None = None,
        reply_to_name: str | None = None,
    ) -> None:
        recipients = tuple(to)
        if not recipients:
            msg = "MailPayload needs at least one recipient"
            raise ValueError(msg)
        object.__setattr__(self, "to", recipients)
        object.__setattr__(self, "subject", subject)
        object.__setattr__(self, "html_body", html_body)
        object.__setattr__(self, "text_body", text_body)
        object.__setattr__(self, "reply_to_email", reply_to_email)
        object.__setattr__(self, "reply_to_name", reply_to_name)
