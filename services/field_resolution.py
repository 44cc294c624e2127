"""Ordered accessors for schema-drifting provider payloads.

A field is described by a tuple of accessors, newest provider schema first.
``resolve`` walks them in that order and returns the first usable value, so
the priority lives in the tuple and not in the input's key order.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional, Sequence


Accessor = Callable[[Dict[str, Any]], Any]
Coercer = Callable[[Any], Any]


def key(name: str) -> Accessor:
    def _get(data: Dict[str, Any]) -> Any:
        return data.get(name)

    _get.__name__ = f"key[{name}]"
    return _get


def nested(*path: str) -> Accessor:
    def _get(data: Dict[str, Any]) -> Any:
        cur: Any = data
        for part in path:
            if not isinstance(cur, dict):
                return None
            cur = cur.get(part)
        return cur

    _get.__name__ = f"nested[{'.'.join(path)}]"
    return _get


def text(value: Any) -> Optional[str]:
    """Strings are stripped, blanks are absent; numbers are stringified; anything else is absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def sequence(value: Any) -> Optional[list]:
    """Coerce a collection candidate to a list; None means 'not present, try the next key'."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, dict):
        return [value]
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = json.loads(stripped)
        except ValueError:
            return None
        if isinstance(parsed, list):
            return parsed
        return None
    return None


def resolve(data: Dict[str, Any], accessors: Sequence[Accessor], coerce: Coercer = text) -> Any:
    for accessor in accessors:
        value = coerce(accessor(data))
        if value is not None:
            return value
    return None
