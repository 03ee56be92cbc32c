"""Handler shape adapter.

Middleware authors write handlers in whichever of six conventions suits
them. :func:`adapt` recognizes the convention and normalizes the value
into the canonical :data:`~phaselayer.http.Middleware` form, a callable
``(next_handler) -> handler``, which is the only form the layer ever
composes.

Supported shapes, in the order they are recognized:

1. ``CHAIN``        ``fn(next_handler) -> handler``, used unchanged
2. ``RESULT``       ``fn(next_handler) -> simple handler or handler object``
3. ``CONTINUATION`` ``fn(response, request, next_handler)``
4. ``SIMPLE``       ``fn(response, request)``, always terminal
5. ``DIRECT``       object exposing ``serve(response, request)``
6. ``CAPABILITY``   object exposing ``handle(response, request, next_handler)``

Untagged callables are classified by their positional arity. ``CHAIN``
and ``RESULT`` share the same arity, so ``RESULT`` has to be requested
explicitly through :class:`Tagged` (or the :func:`result` decorator).
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from phaselayer.http import Handler, Middleware


class HandlerShape(str, Enum):
    CHAIN = "chain"
    RESULT = "result"
    CONTINUATION = "continuation"
    SIMPLE = "simple"
    DIRECT = "direct"
    CAPABILITY = "capability"


@dataclass(frozen=True)
class Tagged:
    """A handler value explicitly labelled with its shape.

    Calling a tagged value calls the wrapped target, so decorated
    functions stay usable on their own.
    """

    shape: HandlerShape
    target: Any

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.target(*args, **kwargs)


def _tagger(shape: HandlerShape) -> Callable[[Any], Tagged]:
    def _tag(target: Any) -> Tagged:
        return Tagged(shape, target)

    _tag.__name__ = shape.value
    _tag.__doc__ = f"Mark *target* as a {shape.value} handler."
    return _tag


chain = _tagger(HandlerShape.CHAIN)
result = _tagger(HandlerShape.RESULT)
continuation = _tagger(HandlerShape.CONTINUATION)
simple = _tagger(HandlerShape.SIMPLE)
direct = _tagger(HandlerShape.DIRECT)
capability = _tagger(HandlerShape.CAPABILITY)


# ── Classification ───────────────────────────────────────────────────────


def _positional_arity(fn: Any) -> Optional[range]:
    """Return the range of positional argument counts *fn* accepts.

    ``None`` means the callable cannot be classified: no introspectable
    signature, a ``*args`` catch-all, or required keyword-only parameters.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return None

    required = 0
    total = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            if param.default is inspect.Parameter.empty:
                return None
            continue
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            continue
        total += 1
        if param.default is inspect.Parameter.empty:
            required += 1
    return range(required, total + 1)


def _has_method(value: Any, name: str) -> bool:
    return callable(getattr(value, name, None))


def _fits(shape: HandlerShape, target: Any) -> bool:
    """Check that an explicitly tagged *target* can honour *shape*."""
    if shape is HandlerShape.DIRECT:
        return _has_method(target, "serve")
    if shape is HandlerShape.CAPABILITY:
        return _has_method(target, "handle")
    return callable(target)


def classify(value: Any) -> Optional[HandlerShape]:
    """Return the shape of *value*, or ``None`` if it matches none."""
    if isinstance(value, Tagged):
        return value.shape if _fits(value.shape, value.target) else None
    if isinstance(value, type):
        return None

    if callable(value):
        arity = _positional_arity(value)
        if arity is not None:
            if 1 in arity:
                return HandlerShape.CHAIN
            if 3 in arity:
                return HandlerShape.CONTINUATION
            if 2 in arity:
                return HandlerShape.SIMPLE

    if _has_method(value, "serve"):
        return HandlerShape.DIRECT
    if _has_method(value, "handle"):
        return HandlerShape.CAPABILITY
    return None


# ── Normalization ────────────────────────────────────────────────────────


def as_handler(value: Any) -> Handler:
    """Coerce a simple handler function or a handler object into a handler."""
    if isinstance(value, Tagged):
        value = value.target
    if _has_method(value, "serve"):
        return value.serve
    if callable(value):
        return value
    raise TypeError(f"Cannot use {type(value).__name__} as a request handler.")


def _adapt_result(fn: Callable[[Handler], Any]) -> Middleware:
    def _middleware(next_handler: Handler) -> Handler:
        return as_handler(fn(next_handler))

    return _middleware


def _adapt_continuation(fn: Callable[[Any, Any, Handler], None]) -> Middleware:
    def _middleware(next_handler: Handler) -> Handler:
        def _handler(response: Any, request: Any) -> None:
            fn(response, request, next_handler)

        return _handler

    return _middleware


def _adapt_simple(fn: Handler) -> Middleware:
    def _middleware(next_handler: Handler) -> Handler:
        return fn

    return _middleware


def _adapt_direct(obj: Any) -> Middleware:
    def _middleware(next_handler: Handler) -> Handler:
        return obj.serve

    return _middleware


def _adapt_capability(obj: Any) -> Middleware:
    def _middleware(next_handler: Handler) -> Handler:
        def _handler(response: Any, request: Any) -> None:
            obj.handle(response, request, next_handler)

        return _handler

    return _middleware


def adapt(value: Any) -> Optional[Middleware]:
    """Normalize *value* into a middleware function.

    Returns ``None`` when *value* is not one of the supported shapes. The
    caller decides how to report that; the adapter itself never raises
    for an unsupported value.
    """
    shape = classify(value)
    if shape is None:
        return None

    target = value.target if isinstance(value, Tagged) else value
    if shape is HandlerShape.CHAIN:
        return target
    if shape is HandlerShape.RESULT:
        return _adapt_result(target)
    if shape is HandlerShape.CONTINUATION:
        return _adapt_continuation(target)
    if shape is HandlerShape.SIMPLE:
        return _adapt_simple(target)
    if shape is HandlerShape.DIRECT:
        return _adapt_direct(target)
    if shape is HandlerShape.CAPABILITY:
        return _adapt_capability(target)
    return None
