"""Money / rounding helpers.

Centralized so conversion, formatting and the API layer use identical
rounding semantics. Display amounts are whole units; no minor-unit handling.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round_whole(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def group_thousands(value: float) -> str:
    """Render ``value`` as a comma-grouped whole number, e.g. 1234.4 -> '1,234'."""
    return f"{round_whole(value):,}"
