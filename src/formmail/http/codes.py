"""Machine-readable outcome codes returned by the submission endpoint."""

from enum import Enum


class ResponseCode(Enum):
    """Outcome of one submission, sent to the client as ``{"code": ...}``."""

    OK = "ok"
    INVALID_METHOD = "invalid_method"
    INVALID_JSON = "invalid_json"
    VALIDATION_ERROR = "validation_error"
    MAIL_FAILURE = "mail_failure"
    INTERNAL_ERROR = "internal_error"

    @property
    def status(self) -> int:
        """HTTP status code for this outcome."""
        return _STATUS[self]


_STATUS: dict[ResponseCode, int] = {
    ResponseCode.OK: 200,
    ResponseCode.INVALID_METHOD: 405,
    ResponseCode.INVALID_JSON: 400,
    ResponseCode.VALIDATION_ERROR: 422,
    ResponseCode.MAIL_FAILURE: 502,
    ResponseCode.INTERNAL_ERROR: 500,
}
