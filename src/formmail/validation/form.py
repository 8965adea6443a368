"""FormDefinition — a named collection of fields and the pipeline runner."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formmail.validation.context import FormContext
from formmail.validation.field import FieldDefinition
from formmail.validation.result import ValidationResult


class FormDefinition:
    """A form schema: fields in registration order.

    Usage::

        form = (
            FormDefinition()
            .add(FieldDefinition("name", processors=[TrimFilter(), RequiredRule()]))
            .add(FieldDefinition("email", processors=[RequiredRule(), EmailRule()]))
        )
        result = form.process({"name": "Julien", "email": "moi@jturbide.com"})

    Registering a second field under an existing name replaces the first
    one (it keeps the original position in the processing order).
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: list[FieldDefinition] | None = None) -> None:
        self._fields: dict[str, FieldDefinition] = {}
        for field in fields or ():
            self.add(field)

    def add(self, field: FieldDefinition) -> FormDefinition:
        """Register *field* by name. Returns ``self`` for chaining."""
        self._fields[field.name] = field
        return self

    def fields(self) -> dict[str, FieldDefinition]:
        """Snapshot of the name → field map, in registration order."""
        return dict(self._fields)

    def process(self, input: Mapping[str, Any]) -> ValidationResult:  # noqa: A002
        """Run every field's pipeline over *input* and snapshot the outcome.

        Each field starts from its raw submitted value (``None`` when the
        key is missing) and passes it through its processors in order,
        each one receiving the previous one's return value. The final
        returned value is then written to the context unconditionally,
        overriding any ``set_value()`` a processor made for that field.

        Errors never stop the run: every field of the form is processed.
        Exceptions raised by processors propagate to the caller.
        """
        context = FormContext(input)

        for name, field in self._fields.items():
            value = input.get(name)
            for processor in field.processors:
                value = processor.process(value, field, context)
            context.set_value(name, value)

        return ValidationResult.from_context(context)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields
