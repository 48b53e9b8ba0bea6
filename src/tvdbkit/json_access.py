"""Null-tolerant field extraction from decoded JSON documents.

TheTVDB responses are loosely structured: fields may be missing, ``null``,
empty strings, numbers encoded as strings, or decimals where integers are
expected. Every accessor here returns ``None`` (or an empty container) for
anything it cannot interpret instead of raising.
"""

from __future__ import annotations

import datetime as dt
import math
import re
from collections.abc import Iterator, Mapping
from typing import Any, Dict, List, Optional

INTEGER_PATTERN = re.compile(r"\d+")


def _value(node: Any, key: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def get_map(node: Any, key: str) -> Dict[str, Any]:
    value = _value(node, key)
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def get_array(node: Any, key: str) -> List[Any]:
    value = _value(node, key)
    if isinstance(value, list):
        return value
    return []


def get_string(node: Any, key: str) -> Optional[str]:
    """Return the field as stripped text, ``None`` when absent or blank."""
    value = _value(node, key)
    if value is None or isinstance(value, (Mapping, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value).strip()
    return text or None


def get_integer(node: Any, key: str) -> Optional[int]:
    """Return the field as an integer.

    Accepts ints, integral floats (the API reports DVD numbers as ``1.0``)
    and numeric strings. Booleans, fractional and non-finite numbers are
    rejected.
    """
    value = _value(node, key)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _integral(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return _integral(number)
    return None


def _integral(number: float) -> Optional[int]:
    if math.isfinite(number) and number.is_integer():
        return int(number)
    return None


def get_decimal(node: Any, key: str) -> Optional[float]:
    value = _value(node, key)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def get_date(node: Any, key: str) -> Optional[dt.date]:
    """Parse an ISO ``YYYY-MM-DD`` field; empty or malformed values give ``None``."""
    text = get_string(node, key)
    if text is None:
        return None
    try:
        return dt.date.fromisoformat(text[:10])
    except ValueError:
        return None


def stream_objects(node: Any, key: str) -> Iterator[Dict[str, Any]]:
    """Yield the mapping elements of an array field, skipping anything else."""
    for item in get_array(node, key):
        if isinstance(item, Mapping):
            yield dict(item)


def match_integer(text: Optional[str]) -> Optional[int]:
    """Return the first run of digits in ``text`` (``"45 min"`` -> 45)."""
    if not text:
        return None
    match = INTEGER_PATTERN.search(text)
    if match is None:
        return None
    return int(match.group(0))
