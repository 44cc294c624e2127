from __future__ import annotations

import math
import re
from typing import Any, Optional


_MAGNITUDES = {"K": 1e3, "M": 1e6, "B": 1e9}
_SHORTHAND_RE = re.compile(r"^(-?[\d.,]+)\s*([KkMmBb])$")
_LEADING_INT_RE = re.compile(r"^-?\d+")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _shorthand(text: str) -> Optional[float]:
    """Parse '1.2K', '3,400M', '2 b' into a float; None when the shape does not match."""
    m = _SHORTHAND_RE.match(text)
    if not m:
        return None
    try:
        num = float(m.group(1).replace(",", ""))
    except ValueError:
        return None
    value = num * _MAGNITUDES[m.group(2).upper()]
    return value if math.isfinite(value) else None


def to_int(value: Any) -> Optional[int]:
    """Coerce provider counters like '1.2K', '3,400', '500+' into an int.

    Returns None for anything unparseable. Zero is a real value and is kept.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value)) if math.isfinite(value) else None
    s = str(value).strip()
    if not s:
        return None
    scaled = _shorthand(s)
    if scaled is not None:
        return int(round(scaled))
    digits = re.sub(r"[^\d-]", "", s)
    m = _LEADING_INT_RE.match(digits)
    if not m:
        return None
    return int(m.group(0))


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    s = str(value).strip()
    if not s:
        return None
    scaled = _shorthand(s)
    if scaled is not None:
        return scaled
    m = _LEADING_FLOAT_RE.match(s.replace(",", ""))
    if not m:
        return None
    number = float(m.group(0))
    return number if math.isfinite(number) else None


def to_count(value: Any) -> Optional[int]:
    """Metric counters (connections, followers) are never negative."""
    parsed = to_int(value)
    if parsed is None or parsed < 0:
        return None
    return parsed
