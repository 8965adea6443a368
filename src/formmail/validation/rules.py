"""Built-in validation rules.

A rule inspects the value and records zero or more errors on the
context. It never changes the value: ``process()`` always returns what
it was given. Each rule implements::

    def validate(self, value, field, context) -> list[ValidationError]: ...

and ``Rule.process`` files whatever comes back under the field's name.

Every rule except ``RequiredRule`` treats an empty string (and any
non-string value) as valid, so "must be present" stays ``RequiredRule``'s
job::

    FieldDefinition("email", processors=[RequiredRule(), EmailRule()])
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable, Sized
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from formmail.validation._text import category_class, to_ascii_domain
from formmail.validation.errors import ValidationError, normalize_error
from formmail.validation.processor import ProcessorCallback, adapt_callback

if TYPE_CHECKING:
    from formmail.validation.context import FormContext
    from formmail.validation.field import FieldDefinition


class Rule:
    """Shared ``process`` for rules: validate, record, pass the value on."""

    __slots__ = ()

    def validate(self, value: Any, field: FieldDefinition, context: FormContext) -> list[ValidationError]:
        """Return the errors for *value*, empty when it passes. Subclasses override this."""
        raise NotImplementedError

    def process(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        for error in self.validate(value, field, context):
            context.add_error(field.name, error)
        return value


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RequiredRule(Rule):
    """Field must be present and non-empty.

    Empty means ``None``, ``False``, an empty collection, or a string
    that is empty (after stripping whitespace when *trim* is set). ``0``,
    ``"0"`` and arbitrary objects count as present. The stripped copy is
    only used for the check; the original value continues down the
    pipeline.
    """

    code: str = "required"
    message: str = 'The field "{field}" is required.'
    trim: bool = True

    def validate(self, value: Any, field: FieldDefinition, context: FormContext) -> list[ValidationError]:
        if not self._is_empty(value):
            return []
        return [ValidationError(self.code, self.message, {"field": field.name}, field.name)]

    def _is_empty(self, value: Any) -> bool:
        if value is None or value is False:
            return True
        if isinstance(value, str):
            return not (value.strip() if self.trim else value)
        if isinstance(value, Sized):
            return len(value) == 0
        return False


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LengthRule(Rule):
    """String length must fall within ``[min, max]``, bounds inclusive.

    Length is counted in characters (*multibyte*) or in bytes of
    *encoding*: ``"ééé"`` is 3 characters but 6 UTF-8 bytes. Both bounds
    are optional, and both errors can fire at once when ``min > max``.
    """

    min: int | None = None
    max: int | None = None
    code_too_short: str = "too_short"
    code_too_long: str = "too_long"
    message_too_short: str = 'The field "{field}" must be at least {min} characters long.'
    message_too_long: str = 'The field "{field}" must not exceed {max} characters.'
    multibyte: bool = True
    encoding: str = "utf-8"

    def validate(self, value: Any, field: FieldDefinition, context: FormContext) -> list[ValidationError]:
        if not isinstance(value, str) or value == "":
            return []

        length = self.measure(value)
        errors: list[ValidationError] = []
        if self.min is not None and length < self.min:
            errors.append(
                ValidationError(
                    self.code_too_short,
                    self.message_too_short,
                    {"field": field.name, "min": self.min, "length": length},
                    field.name,
                )
            )
        if self.max is not None and length > self.max:
            errors.append(
                ValidationError(
                    self.code_too_long,
                    self.message_too_long,
                    {"field": field.name, "max": self.max, "length": length},
                    field.name,
                )
            )
        return errors

    def measure(self, value: str) -> int:
        if self.multibyte:
            return len(value)
        return len(value.encode(self.encoding, errors="replace"))


@dataclass(frozen=True, slots=True)
class MinLengthRule(LengthRule):
    """``LengthRule`` with only a lower bound."""

    def __init__(self, min: int, **options: Any) -> None:  # noqa: A002
        LengthRule.__init__(self, min=min, **options)


@dataclass(frozen=True, slots=True)
class MaxLengthRule(LengthRule):
    """``LengthRule`` with only an upper bound."""

    def __init__(self, max: int, **options: Any) -> None:  # noqa: A002
        LengthRule.__init__(self, max=max, **options)


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RegexRule(Rule):
    """Non-empty strings must contain a match for *pattern*.

    Anchor the pattern yourself (``^…$`` or ``\\A…\\Z``) when the whole
    value must match. An invalid pattern raises ``ValueError`` here
    rather than on the first submission.
    """

    pattern: re.Pattern[str]
    code: str
    message: str

    def __init__(
        self,
        pattern: str | re.Pattern[str],
        code: str = "invalid_format",
        flags: int = 0,
        message: str = "Value does not match pattern: {pattern}",
    ) -> None:
        if isinstance(pattern, re.Pattern):
            compiled = pattern
        else:
            try:
                compiled = re.compile(pattern, flags)
            except re.error as exc:
                msg = f"Invalid regex pattern {pattern!r}: {exc}"
                raise ValueError(msg) from exc
        object.__setattr__(self, "pattern", compiled)
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", message)

    def validate(self, value: Any, field: FieldDefinition, context: FormContext) -> list[ValidationError]:
        if not isinstance(value, str) or value == "":
            return []
        if self.pattern.search(value):
            return []
        return [
            ValidationError(
                self.code,
                self.message,
                {"value": value, "pattern": self.pattern.pattern},
                field.name,
            )
        ]


# Dot-atom local part and dotted hostname, ASCII only
_ATOM = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_ASCII_LOCAL_RE = re.compile(rf"{_ATOM}(?:\.{_ATOM})*\Z")
_ASCII_DOMAIN_RE = re.compile(rf"(?:{_LABEL}\.)+{_LABEL}\Z")
_UNICODE_LOCAL_SYMBOLS = frozenset("!#$%&'*+/=?^_`{|}~.\"-")

_MAX_LOCAL_LENGTH = 64
_MAX_ADDRESS_LENGTH = 254


@dataclass(frozen=True, slots=True)
class EmailRule(Rule):
    """Non-empty strings must be a syntactically valid email address.

    The domain is IDNA-encoded first when *normalize_idn* is set, so
    ``user@dömäin.fr`` is checked as ``user@xn--dmin-moa0i.fr``. Addresses
    that fail the ASCII check get a second, Unicode-aware chance when
    *allow_unicode* is set (``élodie@domain.com``).

    The error context carries the submitted ``value`` and the
    ``normalized`` address that was checked (``None`` when there was
    nothing to check, e.g. no ``@``).
    """

    code: str = "invalid_email"
    message: str = "Invalid email format."
    allow_unicode: bool = True
    normalize_idn: bool = True

    def validate(self, value: Any, field: FieldDefinition, context: FormContext) -> list[ValidationError]:
        if not isinstance(value, str) or value == "":
            return []

        normalized = self.normalize(value)
        if normalized is not None and self.is_valid(normalized):
            return []
        return [
            ValidationError(
                self.code,
                self.message,
                {"value": value, "normalized": normalized},
                field.name,
            )
        ]

    def normalize(self, value: str) -> str | None:
        local, at, domain = value.partition("@")
        if not at or not domain:
            return None
        if self.normalize_idn:
            domain = to_ascii_domain(domain)
        return f"{local}@{domain}"

    def is_valid(self, address: str) -> bool:
        if len(address) > _MAX_ADDRESS_LENGTH:
            return False
        local, _, domain = address.partition("@")
        if not local or len(local) > _MAX_LOCAL_LENGTH:
            return False
        if _ASCII_LOCAL_RE.match(local) and _ASCII_DOMAIN_RE.match(domain):
            return True
        return self.allow_unicode and _unicode_local_ok(local) and _unicode_domain_ok(domain)


def _unicode_local_ok(local: str) -> bool:
    if local.startswith(".") or local.endswith(".") or ".." in local:
        return False
    return all(
        category_class(ch) in ("L", "N", "M")
        or unicodedata.category(ch) in ("Pc", "Pd")
        or ch in _UNICODE_LOCAL_SYMBOLS
        for ch in local
    )


def _unicode_domain_ok(domain: str) -> bool:
    labels = domain.split(".")
    if len(labels) < 2:
        return False
    for label in labels:
        if not label or label.startswith("-") or label.endswith("-"):
            return False
        if not all(category_class(ch) in ("L", "N", "M") or ch == "-" for ch in label):
            return False
    return True


# ---------------------------------------------------------------------------
# Custom
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CallbackRule(Rule):
    """Run a user function as a rule.

    The function returns a list (or tuple) of problems, each either an
    error code string or a ready ``ValidationError``. Empty strings are
    ignored; codes get a humanized message::

        def no_free_mail(value, field, context):
            return ["free_mail"] if value.endswith("@gmail.com") else []

        CallbackRule(no_free_mail)

    Raises:
        TypeError: The function returned something other than a list or
            tuple, or an item that is neither ``str`` nor ``ValidationError``.
    """

    callback: ProcessorCallback

    def __init__(self, fn: Callable[..., Any]) -> None:
        object.__setattr__(self, "callback", adapt_callback(fn))

    def validate(self, value: Any, field: FieldDefinition, context: FormContext) -> list[ValidationError]:
        result = self.callback(value, field, context)
        if not isinstance(result, (list, tuple)):
            msg = f"Rule callback must return a list, got {type(result).__name__}"
            raise TypeError(msg)

        errors: list[ValidationError] = []
        for item in result:
            if isinstance(item, str):
                if not item:
                    continue
            elif not isinstance(item, ValidationError):
                msg = (
                    f"Rule callback returned {type(item).__name__}; "
                    "expected an error code string or a ValidationError"
                )
                raise TypeError(msg)
            errors.append(normalize_error(item, field))
        return errors
