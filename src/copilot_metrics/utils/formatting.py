"""Number rounding and markdown formatting helpers."""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable, Optional, Sequence


def round_half_up(value: float, digits: int = 0) -> float:
    """Round away from banker's rounding so 0.5 always goes up."""

    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def percentage(part: float, whole: float, digits: int = 2) -> float:
    if whole <= 0:
        return 0.0
    return round_half_up(part / whole * 100, digits)


def fmt(value: float) -> str:
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.2f}"
    return f"{int(value):,}"


def fmt_short(value: float) -> str:
    if value >= 1e9:
        return f"{value / 1e9:.1f}b"
    if value >= 1e6:
        return f"{value / 1e6:.1f}m"
    if value >= 1e3:
        return f"{value / 1e3:.1f}k"
    return str(int(value))


def fmt_pct(part: float, whole: float) -> str:
    if whole <= 0:
        return "0.0"
    return f"{part / whole * 100:.1f}"


def fmt_day(day: Optional[date]) -> str:
    return day.isoformat() if day else "N/A"


def markdown_table(
    headers: Sequence[str],
    rows: Iterable[Sequence[object]],
    *,
    centered: bool = False,
) -> str:
    divider = ":---:" if centered else "---"
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join(divider for _ in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(str(cell) for cell in row) + " |")
    return "\n".join(lines)
