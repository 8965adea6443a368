"""Field schema: name, semantic roles, and an ordered processor pipeline."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from formmail.validation.processor import FieldProcessor


class FieldRole(Enum):
    """Semantic tags read by mail composition.

    A field may carry several roles (a ``full_name`` field can be both
    the sender name and part of the subject).
    """

    SENDER_EMAIL = "sender_email"  # Reply-To address
    SENDER_NAME = "sender_name"  # Reply-To display name
    SUBJECT = "subject"  # Joined into the subject line
    BODY = "body"  # Main message content


class FieldDefinition:
    """One named input slot and the processors its value flows through.

    Processor order is significant and kept exactly as declared::

        field = FieldDefinition(
            "email",
            roles=[FieldRole.SENDER_EMAIL],
            processors=[SanitizeEmailFilter(), RequiredRule(), EmailRule()],
        )

    The pipeline may only grow, via ``add_processor()`` and its aliases,
    while the form is being set up.
    """

    __slots__ = ("_processors", "name", "roles")

    def __init__(
        self,
        name: str,
        roles: Iterable[FieldRole] = (),
        processors: Iterable[FieldProcessor] = (),
    ) -> None:
        if not name:
            msg = "Field name must be a non-empty string"
            raise ValueError(msg)
        self.name = name
        # Ordered set: first occurrence wins
        self.roles: tuple[FieldRole, ...] = tuple(dict.fromkeys(roles))
        self._processors: list[FieldProcessor] = list(processors)

    @property
    def processors(self) -> list[FieldProcessor]:
        """The ordered pipeline. Don't mutate it outside this class."""
        return self._processors

    def has_role(self, role: FieldRole) -> bool:
        return role in self.roles

    def add_processor(self, processor: FieldProcessor) -> FieldDefinition:
        """Append *processor* to the pipeline. Returns ``self`` for chaining."""
        self._processors.append(processor)
        return self

    # Readability aliases; behaviorally identical to add_processor()
    def add_filter(self, processor: FieldProcessor) -> FieldDefinition:
        return self.add_processor(processor)

    def add_transformer(self, processor: FieldProcessor) -> FieldDefinition:
        return self.add_processor(processor)

    def add_rule(self, processor: FieldProcessor) -> FieldDefinition:
        return self.add_processor(processor)

    def __repr__(self) -> str:
        roles = ", ".join(role.value for role in self.roles)
        return f"FieldDefinition({self.name!r}, roles=[{roles}], processors={len(self._processors)})"
