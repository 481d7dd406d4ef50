"""
Data models for billing usage.

Defines the typed records parsed from the premium request usage document.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class UsageRecord:
    """One billed line item.

    Immutable once parsed. The category is whatever label the billing API
    reports (normally a model name) and may be empty.
    """
    category: str
    gross_quantity: float


@dataclass(frozen=True)
class UsageSnapshot:
    """All usage records for one user and billing period.

    Produced fresh on every fetch and replaced, never mutated.
    """
    username: str
    year: int
    month: int
    records: Tuple[UsageRecord, ...] = ()
