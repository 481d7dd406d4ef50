"""
Shared formatting helpers for every output mode.
"""

import math
from datetime import date, datetime
from enum import Enum

FILLED_GLYPH = "█"
EMPTY_GLYPH = "░"

WARNING_THRESHOLD = 75.0
CRITICAL_THRESHOLD = 90.0


class UsageLevel(Enum):
    """Threshold bands on percentage of the limit."""
    OK = "green"
    WARNING = "yellow"
    CRITICAL = "red"


def usage_level(percentage: float) -> UsageLevel:
    if percentage >= CRITICAL_THRESHOLD:
        return UsageLevel.CRITICAL
    if percentage >= WARNING_THRESHOLD:
        return UsageLevel.WARNING
    return UsageLevel.OK


def format_percentage(percentage: float) -> str:
    """Format a percentage with one decimal, abbreviating >= 1000 as k%.

    The threshold applies to the rounded value, so 999.96 is 1.0k% rather
    than 1000.0%.
    """
    if round(percentage, 1) >= 1000:
        return f"{percentage / 1000:.1f}k%"
    return f"{percentage:.1f}%"


def filled_cells(used: float, limit: float, width: int) -> int:
    """Number of filled bar cells; never exceeds width."""
    return math.floor((min(used, limit) * width) / limit)


def draw_bar(used: float, limit: float, width: int) -> str:
    filled = filled_cells(used, limit, width)
    return FILLED_GLYPH * filled + EMPTY_GLYPH * (width - filled)


def period_label(now: datetime) -> str:
    """Billing period label, e.g. 'October 2026'."""
    return now.strftime("%B %Y")


def next_reset(now: datetime) -> date:
    """First day of the following month."""
    if now.month == 12:
        return date(now.year + 1, 1, 1)
    return date(now.year, now.month + 1, 1)


def reset_label(now: datetime) -> str:
    reset = next_reset(now)
    return f"Resets: {reset.strftime('%B')} 1, {reset.year} at 00:00 UTC"
