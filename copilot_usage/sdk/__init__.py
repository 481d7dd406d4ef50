"""
Client for the gh command-line tool.

Provides typed access to the Copilot premium request billing endpoint.
"""

from .gh_client import GhClient
from .models import UsageRecord, UsageSnapshot

__all__ = ["GhClient", "UsageRecord", "UsageSnapshot"]
