"""Validation result — immutable snapshot of a finished run."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field as dc_field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from formmail.validation.errors import ValidationError

if TYPE_CHECKING:
    from formmail.validation.context import FormContext


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of running a form's pipelines over one submission.

    ``valid`` is True when no field (and no form-level key) collected an
    error. The result is falsy when invalid, so you can write::

        result = form.process(payload)
        if not result:
            return {"errors": result.messages_all()}

    ``data`` holds the normalized value of every processed field, valid
    or not. ``errors`` maps field names to lists of ``ValidationError``::

        {"email": [ValidationError("required", ...)],
         "message": [ValidationError("too_short", ...)]}

    Both maps are copied on construction and exposed read-only.
    """

    valid: bool
    errors: Mapping[str, tuple[ValidationError, ...]] = dc_field(hash=False)
    data: Mapping[str, Any] = dc_field(hash=False)

    def __init__(
        self,
        valid: bool,
        errors: Mapping[str, list[ValidationError] | tuple[ValidationError, ...]],
        data: Mapping[str, Any],
    ) -> None:
        object.__setattr__(self, "valid", valid)
        object.__setattr__(
            self,
            "errors",
            MappingProxyType({name: tuple(errs) for name, errs in errors.items()}),
        )
        object.__setattr__(self, "data", MappingProxyType(dict(data)))

    @staticmethod
    def from_context(context: FormContext) -> ValidationResult:
        """Snapshot *context*: valid iff it holds no errors."""
        return ValidationResult(
            valid=not context.has_any_errors(),
            errors=context.all_errors(),
            data=context.all_data(),
        )

    # -- Predicates --

    @property
    def is_valid(self) -> bool:
        return self.valid

    @property
    def failed(self) -> bool:
        return not self.valid

    def __bool__(self) -> bool:
        """Falsy when invalid — enables ``if not result:`` pattern."""
        return self.valid

    def has_error(self, field: str) -> bool:
        return bool(self.errors.get(field))

    # -- Accessors --

    def get_errors(self, field: str) -> list[ValidationError]:
        return list(self.errors.get(field, ()))

    def first_error(self, field: str) -> ValidationError | None:
        errs = self.errors.get(field)
        return errs[0] if errs else None

    def all_errors(self) -> dict[str, list[ValidationError]]:
        return {name: list(errs) for name, errs in self.errors.items()}

    def all_data(self) -> dict[str, Any]:
        return dict(self.data)

    # -- Messages --

    @staticmethod
    def interpolate(error: ValidationError) -> str:
        return error.interpolate()

    def messages(self, field: str) -> list[str]:
        """Interpolated messages for *field*, in the order they were added."""
        return [err.interpolate() for err in self.errors.get(field, ())]

    def messages_all(self) -> dict[str, list[str]]:
        return {name: [err.interpolate() for err in errs] for name, errs in self.errors.items()}

    # -- Serialization --

    def to_dict(self, *, interpolate: bool = False) -> dict[str, Any]:
        """JSON-ready form.

        Errors are serialized records (``code``, ``message``, ``context``,
        ``field``), or interpolated strings when *interpolate* is True.
        """
        if interpolate:
            errors: dict[str, list[Any]] = self.messages_all()
        else:
            errors = {name: [err.to_dict() for err in errs] for name, errs in self.errors.items()}
        return {"valid": self.valid, "errors": errors, "data": dict(self.data)}

    def to_json(self, *, interpolate: bool = False) -> str:
        return json.dumps(self.to_dict(interpolate=interpolate), ensure_ascii=False, default=str)
