"""Helpers for safe debug logging.

Store state is application data and may carry credentials or large blobs.
This module renders state values for DEBUG records with sensitive keys
masked and long values truncated.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

_MAX_DEPTH = 20


def redact_for_log(
    value: Any,
    *,
    sensitive_keys: frozenset[str] = frozenset(),
    max_string: int = 512,
    _depth: int = 0,
) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, BaseModel):
        value = value.model_dump()

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in sensitive_keys:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(
                    v, sensitive_keys=sensitive_keys, max_string=max_string, _depth=_depth + 1
                )
        return redacted

    if isinstance(value, Sequence):
        return [
            redact_for_log(v, sensitive_keys=sensitive_keys, max_string=max_string, _depth=_depth + 1)
            for v in value
        ]

    # Callables (actions stored in state) and unknown objects: no internals.
    return repr(value)


def changed_keys(state: Any, previous: Any) -> list[str]:
    """Top-level keys whose values differ by identity between two states."""
    current = _fields(state)
    before = _fields(previous)
    keys = list(current) + [key for key in before if key not in current]
    return [key for key in keys if key not in before or key not in current or current[key] is not before[key]]


def _fields(value: Any) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return {}
