"""Validation errors — immutable, interpolatable failure records.

A ``ValidationError`` carries a stable machine code (``required``,
``too_short``, ``invalid_email``), a message template, the placeholder
values for that template, and the field it belongs to (``None`` for
form-level errors)::

    err = ValidationError("too_short", "At least {min} characters", {"min": 3})
    str(err)  # "At least 3 characters"

``normalize_error()`` turns anything a rule may produce (a bare code, a
description mapping, or a ready-made error) into a ``ValidationError``
bound to the owning field.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field as dc_field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formmail.validation.field import FieldDefinition

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One validation failure. Never mutated after construction.

    "Mutation" helpers (``with_message``, ``with_context``, ``for_field``)
    return new instances.
    """

    code: str
    message: str = ""
    context: Mapping[str, Any] = dc_field(default_factory=dict, hash=False)
    field: str | None = None

    def __post_init__(self) -> None:
        if not self.code:
            msg = "ValidationError code must be a non-empty string"
            raise ValueError(msg)
        # Private read-only copy so the caller's dict can't leak changes in
        object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    def interpolate(self) -> str:
        """Return the message with ``{key}`` tokens replaced from context.

        Unknown tokens are left verbatim. An empty message falls back to
        the error code.
        """
        if not self.message:
            return self.code

        def substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key in self.context:
                return str(self.context[key])
            return match.group(0)

        return _PLACEHOLDER_RE.sub(substitute, self.message)

    def with_message(self, message: str) -> ValidationError:
        """Copy with a different message (e.g. a translation)."""
        return ValidationError(self.code, message, self.context, self.field)

    def with_context(self, extra: Mapping[str, Any]) -> ValidationError:
        """Copy with *extra* merged into the context; *extra* wins on collision."""
        return ValidationError(self.code, self.message, {**self.context, **extra}, self.field)

    def for_field(self, field_name: str) -> ValidationError:
        """Copy bound to *field_name*."""
        return ValidationError(self.code, self.message, self.context, field_name)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
            "field": self.field,
        }

    def __str__(self) -> str:
        return self.interpolate()


# Everything a rule may hand back: a bare code, a description, or an error
type ErrorSource = str | Mapping[str, Any] | ValidationError


def auto_message(code: str) -> str:
    """Humanize an error code: ``too_short`` → ``Too short``."""
    text = code.replace("_", " ")
    return text[:1].upper() + text[1:]


def normalize_error(raw: ErrorSource, field: FieldDefinition) -> ValidationError:
    """Convert *raw* into a ``ValidationError`` bound to *field*.

    - ``ValidationError``: returned as-is, or re-bound to *field* when it
      has no field of its own.
    - ``str``: used as the code; the message is derived from it.
    - mapping: ``code``/``message``/``context``/``field`` keys, with
      missing entries filled from the code and the owning field.

    Raises:
        TypeError: *raw* is none of the above.
    """
    match raw:
        case ValidationError():
            return raw if raw.field is not None else raw.for_field(field.name)
        case str():
            return ValidationError(code=raw, message=auto_message(raw), field=field.name)
        case Mapping():
            return _from_mapping(raw, field)
        case _:
            msg = (
                "Cannot normalize error of type "
                f"{type(raw).__name__}; expected str, mapping, or ValidationError"
            )
            raise TypeError(msg)


def _from_mapping(raw: Mapping[str, Any], field: FieldDefinition) -> ValidationError:
    code = str(raw.get("code") or "unknown")
    message = raw.get("message")
    context = raw.get("context")
    field_name = raw.get("field")
    return ValidationError(
        code=code,
        message=str(message) if message is not None else auto_message(code),
        context=context if isinstance(context, Mapping) else {},
        field=str(field_name) if field_name is not None else field.name,
    )
