"""Formmail exception hierarchy.

Validation failures are never raised: they are collected as
``ValidationError`` values on the ``FormContext``. The exceptions here
cover misconfiguration and delivery problems, which callers are
expected to handle (or let the HTTP entrypoint map to a response code).
"""


class FormmailError(Exception):
    """Base for all formmail-specific errors."""


class ConfigurationError(FormmailError):
    """Raised when settings are invalid.

    Typically raised while building ``SmtpConfig`` from the environment.
    """


class MailTransportError(FormmailError):
    """Raised by a transport when a message could not be delivered.

    The underlying exception is chained (``raise ... from exc``) so the
    original SMTP or socket error stays available via ``__cause__``.
    """
