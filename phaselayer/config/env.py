"""``${VAR}`` placeholders in layer configuration.

Terminal bodies and phase names are the only free-form strings a layer
file holds, so placeholders are resolved in string values only; keys,
numbers and booleans pass through untouched. ``${VAR:-fallback}`` yields
*fallback* when ``VAR`` is unset or empty, and a plain ``${VAR}`` that is
unset stays in the text so validation errors still point at it.
"""

from __future__ import annotations

import os
import re
from typing import Any, Mapping, Optional

_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def _resolve(match: "re.Match[str]", environ: Mapping[str, str]) -> str:
    value = environ.get(match.group("name"))
    fallback = match.group("fallback")
    if fallback is not None and not value:
        return fallback
    return match.group(0) if value is None else value


def expand_env_vars(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Return *value* with placeholders in its string leaves resolved."""
    env = os.environ if environ is None else environ
    if isinstance(value, str):
        return _PLACEHOLDER.sub(lambda m: _resolve(m, env), value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item, env) for item in value]
    return value
