"""HTTP entrypoint: JSON submissions in, outcome codes out."""

from formmail.http.app import SubmissionApp
from formmail.http.codes import ResponseCode
from formmail.http.events import SubmissionEvents
from formmail.http.handler import SubmissionHandler, SubmissionResponse

__all__ = [
    "ResponseCode",
    "SubmissionApp",
    "SubmissionEvents",
    "SubmissionHandler",
    "SubmissionResponse",
]
