"""Formmail — validate form submissions and mail them out.

Declare a form as fields with ordered pipelines of filters, transformers
and rules; get back normalized data and structured errors; turn a valid
submission into a notification email.

Basic usage::

    from formmail import (
        EmailRule, FieldDefinition, FieldRole, FormDefinition,
        RequiredRule, SanitizeEmailFilter, TrimFilter,
    )

    form = FormDefinition([
        FieldDefinition("name", [FieldRole.SENDER_NAME], [TrimFilter(), RequiredRule()]),
        FieldDefinition("email", [FieldRole.SENDER_EMAIL],
                        [SanitizeEmailFilter(), RequiredRule(), EmailRule()]),
    ])
    result = form.process({"name": "Julien", "email": "moi@jturbide.com"})
    assert result.valid

Serving it (any ASGI server)::

    from formmail import SmtpConfig, SmtpTransport, SubmissionApp, SubmissionHandler
    from formmail.config import recipients_from_env

    app = SubmissionApp(
        SubmissionHandler(form, SmtpTransport(SmtpConfig.from_env()), recipients_from_env())
    )
"""

import importlib

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "EmailRule",
    "FieldDefinition",
    "FieldRole",
    "FormContext",
    "FormDefinition",
    "FormmailError",
    "MailPayload",
    "MailTransportError",
    "MemoryTransport",
    "RequiredRule",
    "ResponseCode",
    "SanitizeEmailFilter",
    "SmtpConfig",
    "SmtpTransport",
    "SubmissionApp",
    "SubmissionConfig",
    "SubmissionHandler",
    "TrimFilter",
    "ValidationError",
    "ValidationResult",
    "compose_mail",
]

# Public name → defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "formmail.errors",
    "FormmailError": "formmail.errors",
    "MailTransportError": "formmail.errors",
    "SmtpConfig": "formmail.config",
    "SubmissionConfig": "formmail.config",
    "EmailRule": "formmail.validation",
    "FieldDefinition": "formmail.validation",
    "FieldRole": "formmail.validation",
    "FormContext": "formmail.validation",
    "FormDefinition": "formmail.validation",
    "RequiredRule": "formmail.validation",
    "SanitizeEmailFilter": "formmail.validation",
    "TrimFilter": "formmail.validation",
    "ValidationError": "formmail.validation",
    "ValidationResult": "formmail.validation",
    "MailPayload": "formmail.mail",
    "MemoryTransport": "formmail.mail",
    "SmtpTransport": "formmail.mail",
    "compose_mail": "formmail.mail",
    "ResponseCode": "formmail.http",
    "SubmissionApp": "formmail.http",
    "SubmissionHandler": "formmail.http",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import formmail`` fast; kida and anyio are only loaded when
    mail or HTTP names are first used.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_name), name)
