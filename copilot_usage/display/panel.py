"""
Boxed terminal panel.

Builds a fixed-width rich table with header, overall usage and per-model
sections. Rendering is left to the caller's Console.
"""

from datetime import datetime

from rich import box
from rich.table import Table
from rich.text import Text

from ..core.aggregator import Aggregate
from .formatting import (
    EMPTY_GLYPH,
    FILLED_GLYPH,
    filled_cells,
    format_percentage,
    period_label,
    reset_label,
    usage_level,
)

PANEL_WIDTH = 60
# Panel width minus two borders, two padding cells and the "Usage:  " label
BAR_WIDTH = PANEL_WIDTH - 4 - 8


def _title(plan: str) -> str:
    return f"GitHub Copilot {plan[:1].upper()}{plan[1:]} - Premium Requests"


def _bar(aggregate: Aggregate, width: int) -> Text:
    color = usage_level(aggregate.percentage).value
    filled = filled_cells(aggregate.total, aggregate.limit, width)
    bar = Text()
    bar.append(FILLED_GLYPH * filled, style=color)
    bar.append(EMPTY_GLYPH * (width - filled), style="dim")
    return bar


def _overall_line(aggregate: Aggregate) -> Text:
    color = usage_level(aggregate.percentage).value
    line = Text("Overall:  ")
    line.append(str(round(aggregate.total)), style="bold")
    line.append(f"/{aggregate.limit} (", style="dim")
    line.append(format_percentage(aggregate.percentage), style=f"bold {color}")
    line.append(")", style="dim")
    return line


def _model_line(category: str, quantity: float, limit: int) -> str:
    share = format_percentage((quantity / limit) * 100)
    return f"{category:<22}{round(quantity):>5} {share:>7}"


def render_panel(aggregate: Aggregate, username: str, plan: str, now: datetime) -> Table:
    """Build the usage panel.

    Args:
        aggregate: Aggregated usage for the period
        username: GitHub login shown in the header
        plan: Plan name shown in the title
        now: Current time, used for the period and reset labels

    Returns:
        A rich Table ready to be printed
    """
    table = Table(
        box=box.SQUARE,
        show_header=False,
        width=PANEL_WIDTH,
        padding=(0, 1),
        border_style="dim",
    )
    table.add_column()

    table.add_row("")
    table.add_row(Text(_title(plan), style="bold", justify="center"))
    table.add_row(Text(f"{period_label(now)} • {username}", justify="center"))
    table.add_row("")
    table.add_section()

    table.add_row(_overall_line(aggregate))
    table.add_row(Text("Usage:  ") + _bar(aggregate, BAR_WIDTH))
    table.add_row("")
    table.add_row(reset_label(now))
    table.add_section()

    table.add_row(Text("Per-model usage:", style="dim"))
    table.add_row("")
    ranked = [(category, quantity) for category, quantity in aggregate.ranked() if quantity]
    if not ranked:
        table.add_row("No premium requests used yet.")
    for category, quantity in ranked:
        table.add_row(_model_line(category, quantity, aggregate.limit))
    table.add_row("")

    return table
