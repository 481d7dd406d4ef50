"""
Usage aggregation.

Reduces a usage snapshot into a total and a per-category breakdown.
Pure functions only, no I/O.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..sdk.models import UsageSnapshot

UNKNOWN_CATEGORY = "Unknown"


@dataclass(frozen=True)
class Aggregate:
    """Derived view of one snapshot against one limit."""
    total: float
    by_category: Dict[str, float]
    limit: int

    @property
    def percentage(self) -> float:
        """Usage as a percentage of the limit. Not clamped at 100."""
        return (self.total / self.limit) * 100

    def ranked(self) -> List[Tuple[str, float]]:
        """Categories by descending quantity, ties by ascending label."""
        return sorted(self.by_category.items(), key=lambda item: (-item[1], item[0]))


def aggregate(snapshot: UsageSnapshot, limit: int) -> Aggregate:
    """Aggregate a snapshot against the effective limit.

    Args:
        snapshot: Usage records for the billing period
        limit: Effective monthly limit

    Returns:
        Aggregate with total and per-category sums

    Raises:
        ValueError: If limit is not positive
    """
    if limit <= 0:
        raise ValueError("limit must be > 0")

    total = 0.0
    by_category: Dict[str, float] = {}
    for record in snapshot.records:
        category = record.category or UNKNOWN_CATEGORY
        by_category[category] = by_category.get(category, 0.0) + record.gross_quantity
        total += record.gross_quantity

    return Aggregate(total=total, by_category=by_category, limit=limit)
