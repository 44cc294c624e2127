from __future__ import annotations

import math
from typing import Any, Optional


CIRCULAR_MARKER = "[Circular]"


def sanitize_for_json(value: Any, _stack: Optional[set] = None) -> Any:
    """Return a JSON-safe deep copy of ``value``.

    Containers that reference one of their ancestors are replaced by
    ``CIRCULAR_MARKER``; values json cannot represent are stringified and
    non-finite floats become None. The input is never mutated.
    """
    if _stack is None:
        _stack = set()

    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None

    if isinstance(value, (dict, list, tuple)):
        marker = id(value)
        if marker in _stack:
            return CIRCULAR_MARKER
        _stack.add(marker)
        try:
            if isinstance(value, dict):
                return {str(k): sanitize_for_json(v, _stack) for k, v in value.items()}
            return [sanitize_for_json(v, _stack) for v in value]
        finally:
            _stack.discard(marker)

    return str(value)
