"""Built-in transformers — value rewriters that publish their result.

A transformer changes the value like a filter does, and additionally
writes the result to the context under the field's name, so processors
further down the pipeline (and other fields' callbacks) can read it with
``context.get_value()``. Transformers never record errors.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from formmail.validation._text import (
    check_flavor,
    encode_named_entities,
    escape_special,
    resolve_encoding,
    substitute_invalid,
)
from formmail.validation.processor import ProcessorCallback, adapt_callback

if TYPE_CHECKING:
    from formmail.validation.context import FormContext
    from formmail.validation.field import FieldDefinition


class Transformer:
    """Shared ``process`` for transformers: apply, then store the result."""

    __slots__ = ()

    def apply(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        """Return the rewritten value. Subclasses override this."""
        raise NotImplementedError

    def process(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        result = self.apply(value, field, context)
        context.set_value(field.name, result)
        return result


@dataclass(frozen=True, slots=True)
class LowercaseTransformer(Transformer):
    """Lower-case strings.

    Unicode-aware mode uses full case mapping (``"ÉLÈVE"`` → ``"élève"``);
    otherwise only ASCII ``A``-``Z`` are touched (``"ÉlÈve"``).
    """

    unicode_aware: bool = True

    def apply(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        if not isinstance(value, str):
            return value
        if self.unicode_aware:
            return value.lower()
        return value.translate(_ASCII_LOWER)


_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


@dataclass(frozen=True, slots=True)
class HtmlEntitiesTransformer(Transformer):
    """Encode a string as HTML entities.

    Besides ``& < > " '``, every non-ASCII character with a named HTML
    entity is encoded (``"Café"`` → ``"Caf&eacute;"``). Defaults differ
    from ``HtmlEscapeFilter``: ``html401`` flavor and no double encoding,
    so running it twice changes nothing. Empty strings are left alone.
    """

    flavor: str = "html401"
    double_encode: bool = False
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        check_flavor(self.flavor)
        object.__setattr__(self, "encoding", resolve_encoding(self.encoding))

    def apply(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        if not isinstance(value, str) or not value:
            return value
        escaped = escape_special(value, flavor=self.flavor, double_encode=self.double_encode)
        return substitute_invalid(encode_named_entities(escaped), self.encoding)


@dataclass(frozen=True, slots=True)
class CallbackTransformer(Transformer):
    """Run a user function as a transformer.

    Accepts the same ``(value)``, ``(value, field)`` or
    ``(value, field, context)`` shapes as ``CallbackFilter``::

        CallbackTransformer(lambda value: value.replace(" ", "-"))
    """

    callback: ProcessorCallback

    def __init__(self, fn: Callable[..., Any]) -> None:
        object.__setattr__(self, "callback", adapt_callback(fn))

    def apply(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        return self.callback(value, field, context)
