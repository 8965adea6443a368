"""Turn a validated submission into a ``MailPayload``.

Field roles decide the envelope: the ``SENDER_EMAIL`` / ``SENDER_NAME``
fields become the Reply-To, ``SUBJECT`` fields are joined into the
subject line. Every form field ends up in the bodies, in form order.
"""

from collections.abc import Iterable

from formmail.mail.payload import MailPayload
from formmail.templating.render import TemplateRenderer, display_value
from formmail.validation.field import FieldRole
from formmail.validation.form import FormDefinition
from formmail.validation.result import ValidationResult

DEFAULT_SUBJECT = "New Form Submission"
SUBJECT_SEPARATOR = " - "


def compose_mail(
    form: FormDefinition,
    result: ValidationResult,
    recipients: Iterable[str],
    *,
    default_subject: str = DEFAULT_SUBJECT,
    html_template: str | None = None,
    text_template: str | None = None,
    renderer: TemplateRenderer | None = None,
) -> MailPayload:
    """Build the notification for *result*, which should be valid.

    Custom templates receive every form field by name (``None`` as an
    empty string) and are rendered with kida; the HTML one autoescapes.
    Without them the default layouts list every form field, empty ones
    included.

    Raises:
        ValueError: *recipients* is empty.
    """
    renderer = renderer or TemplateRenderer()

    reply_to_email: str | None = None
    reply_to_name: str | None = None
    subject_parts: list[str] = []

    for name, field in form.fields().items():
        value = result.data.get(name)
        if value is None or value == "":
            continue
        text = display_value(value)
        if field.has_role(FieldRole.SENDER_EMAIL):
            reply_to_email = text
        if field.has_role(FieldRole.SENDER_NAME):
            reply_to_name = text
        if field.has_role(FieldRole.SUBJECT):
            subject_parts.append(text)

    subject = SUBJECT_SEPARATOR.join(subject_parts) or default_subject

    template_data = {name: display_value(result.data.get(name)) for name in form.fields()}

    if html_template is not None:
        html_body = renderer.render(html_template, template_data, autoescape=True)
    else:
        html_body = renderer.default_html(template_data, subject)

    if text_template is not None:
        text_body = renderer.render(text_template, template_data)
    else:
        text_body = renderer.default_text(template_data, subject)

    return MailPayload(
        to=recipients,
        subject=subject,
        html_body=html_body,
        text_body=text_body,
        reply_to_email=reply_to_email,
        reply_to_name=reply_to_name,
    )
