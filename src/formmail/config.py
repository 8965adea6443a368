"""Submission and transport configuration.

Frozen dataclasses: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``SmtpConfig.from_env()`` is the only place
that reads the process environment.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from formmail.errors import ConfigurationError

_ENCRYPTION_MODES = frozenset({"", "ssl", "tls"})
_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class SmtpConfig:
    """SMTP transport settings. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = SmtpConfig(host="mail.example.com", port=465, encryption="ssl")
    """

    host: str = "localhost"
    port: int = 25
    username: str = ""
    password: str = ""
    encryption: str = ""  # "", "ssl" (implicit TLS) or "tls" (STARTTLS)
    auth: bool = False
    timeout: float = 10.0

    # Sender; falls back to the submission's reply-to address when None
    from_email: str | None = None
    from_name: str = "Form Notification"

    def __post_init__(self) -> None:
        if self.encryption not in _ENCRYPTION_MODES:
            msg = (
                f"Invalid SMTP encryption {self.encryption!r}. "
                "Must be one of: '', 'ssl', 'tls'."
            )
            raise ConfigurationError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SmtpConfig":
        """Build a config from ``SMTP_*`` / ``FROM_*`` environment variables.

        Unset variables keep the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("SMTP_HOST", defaults.host),
            port=_parse_number(env, "SMTP_PORT", int, defaults.port),
            username=env.get("SMTP_USER", defaults.username),
            password=env.get("SMTP_PASS", defaults.password),
            encryption=env.get("SMTP_ENCRYPTION", defaults.encryption).strip().lower(),
            auth=env.get("SMTP_AUTH", "").strip().lower() in _TRUTHY,
            timeout=_parse_number(env, "SMTP_TIMEOUT", float, defaults.timeout),
            from_email=env.get("FROM_EMAIL") or defaults.from_email,
            from_name=env.get("FROM_NAME", defaults.from_name),
        )


@dataclass(frozen=True, slots=True)
class SubmissionConfig:
    """How the HTTP entrypoint composes mail, reports errors, and logs."""

    # Mail composition
    default_subject: str = "New Form Submission"
    html_template: str | None = None
    text_template: str | None = None

    # Interpolated message strings instead of error records
    interpolate_errors: bool = False

    # Submission logging
    log_raw_input: bool = False  # Raw input may contain PII
    log_success: bool = True
    log_failure: bool = True


def recipients_from_env(environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Read the comma-separated ``CONTACT_RECIPIENTS`` variable."""
    env = os.environ if environ is None else environ
    raw = env.get("CONTACT_RECIPIENTS", "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_number[T: (int, float)](
    env: Mapping[str, str], name: str, kind: type[T], default: T
) -> T:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigurationError(msg) from None
