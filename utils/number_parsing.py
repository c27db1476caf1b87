from __future__ import annotations

import re
from typing import Any, Optional


def parse_int(value: Any) -> Optional[int]:
    """Parse '1987', ' 42 ', '1987.0' or 1987 into an integer.

    Returns None for empty or unparsable inputs.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    s = str(value).strip()
    if not s:
        return None
    if re.match(r"^-?[0-9]+$", s):
        return int(s)
    if re.match(r"^-?[0-9]+\.0*$", s):
        return int(float(s))
    return None


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip()
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def parse_flag(value: Any) -> bool:
    """Import files encode booleans as the literal 'true'; anything else is false."""
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() == "true"
