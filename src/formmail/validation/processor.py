"""The FieldProcessor protocol and callback adapters.

A processor is any object with the method::

    def process(self, value: Any, field: FieldDefinition, context: FormContext) -> Any: ...

No base class required. Filters, transformers and rules are three
families of classes that all satisfy this one shape; the pipeline checks
the shape, not the lineage.

Processors must not keep per-call state of their own. The same instance
may be shared by many fields and many forms; everything that changes
during a run lives on the ``FormContext``.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from formmail.validation.context import FormContext
    from formmail.validation.field import FieldDefinition


# The fixed callback shape every callback processor stores
type ProcessorCallback = Callable[[Any, FieldDefinition, FormContext], Any]


@runtime_checkable
class FieldProcessor(Protocol):
    """One stage of a field pipeline.

    Receives the current value, returns the (possibly transformed) value.
    May record errors or write values on *context* as a side effect.
    """

    def process(self, value: Any, field: FieldDefinition, context: FormContext) -> Any: ...


# ---------------------------------------------------------------------------
# Callback adapters
# ---------------------------------------------------------------------------


def from_value(fn: Callable[[Any], Any]) -> ProcessorCallback:
    """Adapt a one-argument ``fn(value)`` to the full callback shape."""

    def adapter(value: Any, field: FieldDefinition, context: FormContext) -> Any:
        return fn(value)

    return adapter


def from_field(fn: Callable[[Any, FieldDefinition], Any]) -> ProcessorCallback:
    """Adapt a two-argument ``fn(value, field)`` to the full callback shape."""

    def adapter(value: Any, field: FieldDefinition, context: FormContext) -> Any:
        return fn(value, field)

    return adapter


def adapt_callback(fn: Callable[..., Any]) -> ProcessorCallback:
    """Wrap *fn* so it can always be called as ``(value, field, context)``.

    The number of positional parameters is inspected once, here. Callables
    taking one, two or three arguments are adapted; a callable whose
    signature fits none of those raises ``TypeError`` when first invoked.
    Callables whose signature can't be inspected (some builtins) are
    assumed to take the value only.
    """
    if not callable(fn):
        msg = f"Expected a callable, got {type(fn).__name__}"
        raise TypeError(msg)

    arity = _positional_arity(fn)
    if arity is None or arity == 1:
        return from_value(fn)
    if arity == 2:
        return from_field(fn)
    if arity == 3:
        return fn

    def unsupported(value: Any, field: FieldDefinition, context: FormContext) -> Any:
        msg = (
            f"Callback {_describe(fn)} must accept 1 (value), 2 (value, field) "
            f"or 3 (value, field, context) positional arguments, not {arity}"
        )
        raise TypeError(msg)

    return unsupported


def _positional_arity(fn: Callable[..., Any]) -> int | None:
    """Count how many positional arguments *fn* should receive.

    ``*args`` counts as "as many as offered" (3). Parameters with defaults
    beyond the first are not required, so they don't raise the arity.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return None

    required = 0
    optional = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return 3
        if param.kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            continue
        if param.default is inspect.Parameter.empty:
            required += 1
        else:
            optional += 1

    if required == 0:
        # fn(v=None) style: hand over as many arguments as it will take
        return min(optional, 3) or 0
    return required


def _describe(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
