"""Submission lifecycle logging.

All events go to the ``formmail.submission`` logger. Raw input can carry
personal data, so by default only the submitted field names are logged;
``SubmissionConfig.log_raw_input`` turns full input logging on.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from formmail.config import SubmissionConfig
from formmail.validation.errors import ValidationError

logger = logging.getLogger("formmail.submission")


class SubmissionEvents:
    """Records start, validation failure, success and exception events."""

    __slots__ = ("config",)

    def __init__(self, config: SubmissionConfig) -> None:
        self.config = config

    def started(self, input: Mapping[str, Any]) -> None:  # noqa: A002
        if self.config.log_raw_input:
            logger.info("Form submission received: input=%r", dict(input))
        else:
            logger.info("Form submission received: fields=%s", list(input))

    def validation_failed(self, errors: Mapping[str, Sequence[ValidationError]]) -> None:
        if not self.config.log_failure:
            return
        summary = {name: [err.code for err in errs] for name, errs in errors.items()}
        logger.warning("Validation failed: %s", summary)

    def succeeded(self, data: Mapping[str, Any], recipients: Sequence[str], subject: str) -> None:
        if not self.config.log_success:
            return
        logger.info(
            "Form submission succeeded: fields=%s to=%s subject=%r",
            list(data),
            list(recipients),
            subject,
        )

    def failed(self, exc: BaseException) -> None:
        if not self.config.log_failure:
            return
        logger.error(
            "Submission failed: %s: %s",
            type(exc).__name__,
            exc,
            exc_info=exc,
        )
