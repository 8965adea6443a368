"""Form validation — field pipelines of filters, transformers and rules.

Usage::

    from formmail.validation import (
        EmailRule, FieldDefinition, FieldRole, FormDefinition,
        RequiredRule, SanitizeEmailFilter, TrimFilter,
    )

    form = FormDefinition([
        FieldDefinition("name", [FieldRole.SENDER_NAME], [TrimFilter(), RequiredRule()]),
        FieldDefinition("email", [FieldRole.SENDER_EMAIL],
                        [SanitizeEmailFilter(), RequiredRule(), EmailRule()]),
    ])
    result = form.process(payload)
    if not result:
        return result.messages_all()
    # result.data has normalized values
"""

from collections.abc import Mapping, Sequence
from typing import Any

from formmail.validation.context import GLOBAL_FIELD, FormContext
from formmail.validation.errors import ErrorSource, ValidationError, auto_message, normalize_error
from formmail.validation.field import FieldDefinition, FieldRole
from formmail.validation.filters import (
    CallbackFilter,
    Filter,
    HtmlEscapeFilter,
    NormalizeNewlinesFilter,
    RemoveEmojiFilter,
    RemoveUrlFilter,
    SanitizeEmailFilter,
    SanitizePhoneFilter,
    SanitizeTextFilter,
    StripTagsFilter,
    TrimFilter,
)
from formmail.validation.form import FormDefinition
from formmail.validation.processor import (
    FieldProcessor,
    ProcessorCallback,
    adapt_callback,
    from_field,
    from_value,
)
from formmail.validation.result import ValidationResult
from formmail.validation.rules import (
    CallbackRule,
    EmailRule,
    LengthRule,
    MaxLengthRule,
    MinLengthRule,
    RegexRule,
    RequiredRule,
    Rule,
)
from formmail.validation.transformers import (
    CallbackTransformer,
    HtmlEntitiesTransformer,
    LowercaseTransformer,
    Transformer,
)

__all__ = [
    "GLOBAL_FIELD",
    "CallbackFilter",
    "CallbackRule",
    "CallbackTransformer",
    "EmailRule",
    "ErrorSource",
    "FieldDefinition",
    "FieldProcessor",
    "FieldRole",
    "Filter",
    "FormContext",
    "FormDefinition",
    "HtmlEntitiesTransformer",
    "HtmlEscapeFilter",
    "LengthRule",
    "LowercaseTransformer",
    "MaxLengthRule",
    "MinLengthRule",
    "NormalizeNewlinesFilter",
    "ProcessorCallback",
    "RegexRule",
    "RemoveEmojiFilter",
    "RemoveUrlFilter",
    "RequiredRule",
    "Rule",
    "SanitizeEmailFilter",
    "SanitizePhoneFilter",
    "SanitizeTextFilter",
    "StripTagsFilter",
    "Transformer",
    "TrimFilter",
    "ValidationError",
    "ValidationResult",
    "adapt_callback",
    "auto_message",
    "from_field",
    "from_value",
    "normalize_error",
    "validate",
]


def validate(
    data: Mapping[str, Any],
    pipelines: Mapping[str, Sequence[FieldProcessor]],
) -> ValidationResult:
    """Validate *data* against ad-hoc pipelines, without declaring a form.

    Args:
        data: The submitted values.
        pipelines: Field name → processors, in the order they should run.

    Returns:
        The ``ValidationResult`` of an equivalent ``FormDefinition``.

    Example::

        result = validate(payload, {
            "email": [TrimFilter(), RequiredRule(), EmailRule()],
            "message": [RequiredRule(), MinLengthRule(10)],
        })
    """
    form = FormDefinition(
        [FieldDefinition(name, processors=processors) for name, processors in pipelines.items()]
    )
    return form.process(data)
