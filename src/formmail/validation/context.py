"""FormContext — the per-run scratchpad shared by every processor.

One context is created for each ``FormDefinition.process()`` call. It
carries three maps:

- ``input``: the raw submitted values, never modified;
- ``data``: normalized values, written as processors run;
- ``errors``: field name → ordered list of ``ValidationError``.

Reads never raise: unknown keys come back as ``None`` or an empty list.
The context is not thread-safe: it is created, used linearly, and
discarded within one validation run.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formmail.validation.errors import ValidationError

# Error-map key for form-level (not field-specific) errors
GLOBAL_FIELD = "_form"


class FormContext:
    """Mutable carrier of input, evolving data, and collected errors.

    Usage::

        ctx = FormContext({"email": " A@B.COM "})
        ctx.set_value("email", "a@b.com")
        ctx.get_value("email")   # "a@b.com"
        ctx.get_input("email")   # " A@B.COM "
    """

    __slots__ = ("_data", "_errors", "_input")

    def __init__(
        self,
        input: Mapping[str, Any] | None = None,  # noqa: A002
        data: Mapping[str, Any] | None = None,
        errors: Mapping[str, list[ValidationError]] | None = None,
    ) -> None:
        self._input: dict[str, Any] = dict(input or {})
        self._data: dict[str, Any] = dict(data or {})
        self._errors: dict[str, list[ValidationError]] = {
            name: list(errs) for name, errs in (errors or {}).items()
        }

    # -- Input / data access --

    def get_input(self, field: str) -> Any:
        """Raw submitted value, or ``None``."""
        return self._input.get(field)

    def get_value(self, field: str) -> Any:
        """Normalized value if one was set, else the raw input, else ``None``."""
        if field in self._data:
            return self._data[field]
        return self._input.get(field)

    def set_value(self, field: str, value: Any) -> None:
        """Overwrite the normalized value for *field*. Last writer wins."""
        self._data[field] = value

    def all_input(self) -> dict[str, Any]:
        return dict(self._input)

    def all_data(self) -> dict[str, Any]:
        return dict(self._data)

    # -- Errors --

    def add_error(self, field: str, error: ValidationError) -> None:
        """Append *error* to *field*'s list. Never deduplicates."""
        self._errors.setdefault(field, []).append(error)

    def add_global_error(self, error: ValidationError) -> None:
        """Record a form-level error under ``GLOBAL_FIELD``."""
        self.add_error(GLOBAL_FIELD, error)

    def has_error(self, field: str) -> bool:
        return bool(self._errors.get(field))

    def has_any_errors(self) -> bool:
        return any(self._errors.values())

    def get_field_errors(self, field: str) -> list[ValidationError]:
        return list(self._errors.get(field, ()))

    def all_errors(self) -> dict[str, list[ValidationError]]:
        return {name: list(errs) for name, errs in self._errors.items()}

    # -- Bulk mutation --

    def set_all_errors(self, errors: Mapping[str, list[ValidationError]]) -> None:
        """Replace the whole error map."""
        self._errors = {name: list(errs) for name, errs in errors.items()}

    def clear_field_errors(self, field: str) -> None:
        self._errors.pop(field, None)

    def clear_all_errors(self) -> None:
        self._errors = {}

    # -- Copy-on-write branches --

    def with_value(self, field: str, value: Any) -> FormContext:
        """Independent copy with *field* set to *value*. ``self`` is untouched."""
        clone = self._copy()
        clone.set_value(field, value)
        return clone

    def with_error(self, field: str, error: ValidationError) -> FormContext:
        """Independent copy with *error* appended. ``self`` is untouched."""
        clone = self._copy()
        clone.add_error(field, error)
        return clone

    def _copy(self) -> FormContext:
        # Errors are immutable, so copying the lists is enough
        return FormContext(self._input, self._data, self._errors)

    def __repr__(self) -> str:
        return (
            f"FormContext(input={len(self._input)} keys, data={len(self._data)} keys, "
            f"errors={sum(len(errs) for errs in self._errors.values())})"
        )
