"""
Plan table and quota lookups.

Maps Copilot subscription plans to their monthly premium request quota.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from .errors import ConfigurationError

DEFAULT_PLAN = "pro+"
FALLBACK_LIMIT = 1500


@dataclass(frozen=True)
class PlanTable:
    """Fixed quota table for supported plans."""
    quotas: Mapping[str, int]

    @property
    def names(self) -> Tuple[str, ...]:
        """Plan names in table order."""
        return tuple(self.quotas)

    def normalize(self, plan: str) -> str:
        """Return the canonical (lower-case) plan name.

        Raises:
            ConfigurationError: If the plan is not in the table
        """
        key = plan.strip().lower()
        if key not in self.quotas:
            raise ConfigurationError(
                f'Unknown plan "{plan}". Valid plans: {", ".join(self.names)}'
            )
        return key

    def is_known(self, plan: str) -> bool:
        return plan.strip().lower() in self.quotas

    def get_quota(self, plan: str) -> int:
        """Get the monthly quota for a plan.

        Args:
            plan: Plan identifier, case-insensitive

        Returns:
            Monthly premium request quota

        Raises:
            ConfigurationError: If the plan is not supported
        """
        return self.quotas[self.normalize(plan)]


# Fixed plan table - no dynamic fetching
PLAN_TABLE = PlanTable(MappingProxyType({
    "free": 50,
    "pro": 300,
    "pro+": 1500,
    "business": 300,
    "enterprise": 1000,
}))
