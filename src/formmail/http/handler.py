"""Submission handling — JSON in, validation, mail out, outcome code back.

The handler is synchronous and transport-agnostic: it takes the request
method and raw body and returns a ``SubmissionResponse``. ``SubmissionApp``
puts it behind ASGI; tests and scripts can call it directly::

    handler = SubmissionHandler(form, MemoryTransport(), ["team@example.com"])
    response = handler.handle("POST", b'{"email": "moi@jturbide.com"}')
    response.code    # ResponseCode.OK
    response.status  # 200
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from formmail.config import SubmissionConfig
from formmail.http.codes import ResponseCode
from formmail.http.events import SubmissionEvents
from formmail.mail.compose import compose_mail
from formmail.mail.transport import MailTransport
from formmail.templating.render import TemplateRenderer
from formmail.validation.form import FormDefinition
from formmail.validation.result import ValidationResult


@dataclass(frozen=True, slots=True)
class SubmissionResponse:
    """Outcome code plus, for validation failures, the per-field errors."""

    code: ResponseCode
    errors: Mapping[str, list[Any]] | None = None

    @property
    def status(self) -> int:
        return self.code.status

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code.value}
        if self.errors is not None:
            body["errors"] = dict(self.errors)
        return body

    @property
    def body_bytes(self) -> bytes:
        """UTF-8 JSON body; non-ASCII characters are not escaped."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str).encode("utf-8")


class SubmissionHandler:
    """Runs one form submission end to end.

    Transport and template failures are logged and reported as
    ``MAIL_FAILURE``. Exceptions from the form pipeline itself (a
    misbehaving processor) propagate to the caller.
    """

    __slots__ = ("config", "events", "form", "recipients", "renderer", "transport")

    def __init__(
        self,
        form: FormDefinition,
        transport: MailTransport,
        recipients: Iterable[str],
        config: SubmissionConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.form = form
        self.transport = transport
        self.recipients = tuple(recipients)
        self.config = config or SubmissionConfig()
        self.renderer = renderer or TemplateRenderer()
        self.events = SubmissionEvents(self.config)

    def handle(self, method: str, body: bytes | str | None) -> SubmissionResponse:
        method = method.upper()
        if method == "OPTIONS":
            # CORS preflight
            return SubmissionResponse(ResponseCode.OK)
        if method != "POST":
            return SubmissionResponse(ResponseCode.INVALID_METHOD)

        payload = _parse_json_object(body)
        if payload is None:
            return SubmissionResponse(ResponseCode.INVALID_JSON)

        self.events.started(payload)
        result = self.form.process(payload)

        if result.failed:
            self.events.validation_failed(result.errors)
            return SubmissionResponse(ResponseCode.VALIDATION_ERROR, self._error_body(result))

        try:
            mail = compose_mail(
                self.form,
                result,
                self.recipients,
                default_subject=self.config.default_subject,
                html_template=self.config.html_template,
                text_template=self.config.text_template,
                renderer=self.renderer,
            )
            self.transport.send(mail)
        except Exception as exc:
            self.events.failed(exc)
            return SubmissionResponse(ResponseCode.MAIL_FAILURE)

        self.events.succeeded(result.data, mail.to, mail.subject)
        return SubmissionResponse(ResponseCode.OK)

    def _error_body(self, result: ValidationResult) -> dict[str, list[Any]]:
        if self.config.interpolate_errors:
            return result.messages_all()
        return {name: [err.to_dict() for err in errs] for name, errs in result.errors.items()}


def _parse_json_object(body: bytes | str | None) -> dict[str, Any] | None:
    """Decode *body* as a JSON object, or ``None`` if it isn't one."""
    if not body:
        return None
    try:
        decoded = json.loads(body)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None
