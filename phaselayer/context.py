"""Request-scoped key/value store.

Values live on the Starlette request ``state`` namespace, so they share
the lifetime of the request and never leak between requests.
"""

from __future__ import annotations

from typing import Any, Optional

from phaselayer.constants import ERROR_CONTEXT_KEY

_MISSING = object()


def set(request: Any, key: str, value: Any) -> None:  # noqa: A001
    """Store *value* under *key* for the lifetime of *request*."""
    setattr(request.state, key, value)


def get(request: Any, key: str, default: Any = None) -> Any:
    """Return the value stored under *key*, or *default*."""
    value = getattr(request.state, key, _MISSING)
    return default if value is _MISSING else value


def delete(request: Any, key: str) -> None:
    """Remove *key* from the request store if present."""
    if getattr(request.state, key, _MISSING) is not _MISSING:
        delattr(request.state, key)


def get_error(request: Any, key: str = ERROR_CONTEXT_KEY) -> Optional[Exception]:
    """Return the failure captured by the layer's failure trap, if any."""
    return get(request, key)
