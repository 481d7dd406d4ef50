"""
i3bar status element for the usage summary.
"""

from typing import Dict

from ..core.aggregator import Aggregate
from .formatting import UsageLevel, draw_bar, format_percentage, usage_level

ELEMENT_NAME = "copilot"
ELEMENT_BAR_WIDTH = 10

ELEMENT_COLORS = {
    UsageLevel.OK: "#00FF00",
    UsageLevel.WARNING: "#FFFF00",
    UsageLevel.CRITICAL: "#FF0000",
}


def render_status_element(aggregate: Aggregate) -> Dict[str, str]:
    """Build the synthetic element injected into every status-line frame."""
    bar = draw_bar(aggregate.total, aggregate.limit, ELEMENT_BAR_WIDTH)
    return {
        "name": ELEMENT_NAME,
        "full_text": f"Copilot: {bar} {format_percentage(aggregate.percentage)}",
        "color": ELEMENT_COLORS[usage_level(aggregate.percentage)],
    }
