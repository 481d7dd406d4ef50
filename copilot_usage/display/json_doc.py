"""
JSON document output.
"""

from datetime import datetime
from typing import Any, Dict

from ..core.aggregator import Aggregate
from .formatting import period_label


def build_json_document(aggregate: Aggregate, username: str, plan: str, now: datetime) -> Dict[str, Any]:
    """Build the machine-readable usage document.

    Keys are fixed; percentage is a one-decimal string and models holds the
    full per-category mapping.
    """
    return {
        "username": username,
        "plan": plan,
        "limit": aggregate.limit,
        "used": aggregate.total,
        "percentage": f"{aggregate.percentage:.1f}",
        "month": period_label(now),
        "models": dict(aggregate.ranked()),
    }
