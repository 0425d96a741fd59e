"""Lenient integer parsing for query-string values.

Ids and page numbers are never rejected: a leading integer prefix is used
(``"12abc"`` -> 12) and anything without one becomes 0. Only ASCII digits
count, so other scripts' numerals read as 0. Surrounding whitespace and a
sign are accepted.
"""

import re
from typing import Final

_LEADING_INT: Final[re.Pattern[str]] = re.compile(r"^\s*([+-]?[0-9]+)")


def lenient_int(value: str | None, default: int = 0) -> int:
    """Convert a query value to an integer without failing.

    Args:
        value: Raw query-string value, or None when the key is absent.
        default: Returned when ``value`` is None.

    Returns:
        int: The parsed integer, 0 when ``value`` has no numeric prefix.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def parse_id_list(raw: str) -> list[int]:
    """Split a comma-separated id list, converting every segment leniently.

    Order and duplicates are preserved: ``"2,x,2"`` -> ``[2, 0, 2]``.
    """
    return [lenient_int(segment) for segment in raw.split(",")]
