"""
gh CLI wrapper.

Runs the pre-authenticated gh tool as a synchronous subprocess and parses its
output. All failures are loud: there is no retry and no caching here.
"""

import json
import logging
import math
import subprocess
from typing import Any, List, Optional

from ..core.errors import ExternalToolError, ExternalToolFailure
from .models import UsageRecord, UsageSnapshot

logger = logging.getLogger(__name__)

USAGE_ENDPOINT = "/users/{username}/settings/billing/premium_request/usage?year={year}&month={month}"

GH_HINT = (
    "Make sure you have:\n"
    "  1. gh CLI installed and authenticated (gh auth login)\n"
    "  2. A valid GitHub token with appropriate permissions"
)


class GhClient:
    """Thin client over `gh api` for identity and billing data."""

    def __init__(self, executable: str = "gh", timeout: Optional[float] = 30.0):
        """Initialize the client.

        Args:
            executable: gh executable name or path
            timeout: Seconds to wait for each gh call (None waits forever)

        Raises:
            ValueError: If executable is empty
        """
        if not executable or not executable.strip():
            raise ValueError("executable is required and cannot be empty")
        self.executable = executable
        self.timeout = timeout

    def _run(self, args: List[str]) -> str:
        cmd = [self.executable, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ExternalToolError(
                f"{self.executable} did not respond within {self.timeout}s",
                ExternalToolFailure.LAUNCH,
                hint=GH_HINT,
            )
        except OSError as e:
            raise ExternalToolError(
                f"Could not run {self.executable}: {e}",
                ExternalToolFailure.LAUNCH,
                hint=GH_HINT,
            )
        except UnicodeDecodeError as e:
            raise ExternalToolError(
                f"{self.executable} produced output that is not valid UTF-8: {e}",
                ExternalToolFailure.MALFORMED,
                hint=GH_HINT,
            )

        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            message = f"{self.executable} exited with status {result.returncode}"
            if detail:
                message += f": {detail}"
            raise ExternalToolError(message, ExternalToolFailure.EXIT, hint=GH_HINT)

        return result.stdout

    def current_username(self) -> str:
        """Return the login of the authenticated gh user.

        Raises:
            ExternalToolError: If gh fails or prints nothing
        """
        username = self._run(["api", "/user", "-q", ".login"]).strip()
        if not username:
            raise ExternalToolError(
                "gh returned an empty username",
                ExternalToolFailure.MALFORMED,
                hint=GH_HINT,
            )
        return username

    def fetch_usage(self, username: str, year: int, month: int) -> UsageSnapshot:
        """Fetch premium request usage for one billing period.

        Args:
            username: GitHub login
            year: Billing year
            month: Billing month (1-12)

        Returns:
            UsageSnapshot with one record per usage item

        Raises:
            ExternalToolError: If gh fails or the document is malformed
        """
        endpoint = USAGE_ENDPOINT.format(username=username, year=year, month=month)
        output = self._run(["api", endpoint])

        try:
            document = json.loads(output)
        except json.JSONDecodeError as e:
            raise ExternalToolError(
                f"Could not parse usage response: {e}",
                ExternalToolFailure.MALFORMED,
                hint=GH_HINT,
            )

        return UsageSnapshot(
            username=username,
            year=year,
            month=month,
            records=tuple(parse_usage_items(document)),
        )


def _parse_quantity(value: Any) -> float:
    # bool is an int subclass but never a quantity
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExternalToolError(
            f"grossQuantity must be a number, got {value!r}",
            ExternalToolFailure.MALFORMED,
        )
    if not math.isfinite(value):
        raise ExternalToolError(
            f"grossQuantity must be finite, got {value!r}",
            ExternalToolFailure.MALFORMED,
        )
    if value < 0:
        raise ExternalToolError(
            f"grossQuantity must be >= 0, got {value!r}",
            ExternalToolFailure.MALFORMED,
        )
    return float(value)


def parse_usage_items(document: Any) -> List[UsageRecord]:
    """Parse the usageItems array of a billing document.

    A missing or null usageItems means no usage yet. Extra fields are ignored.

    Raises:
        ExternalToolError: If the document does not have the expected shape
    """
    if not isinstance(document, dict):
        raise ExternalToolError(
            "Usage response must be a JSON object",
            ExternalToolFailure.MALFORMED,
        )

    items = document.get("usageItems") or []
    if not isinstance(items, list):
        raise ExternalToolError(
            "usageItems must be an array",
            ExternalToolFailure.MALFORMED,
        )

    records = []
    for item in items:
        if not isinstance(item, dict):
            raise ExternalToolError(
                f"usage item must be an object, got {item!r}",
                ExternalToolFailure.MALFORMED,
            )
        model = item.get("model")
        records.append(UsageRecord(
            category=model if isinstance(model, str) else "",
            gross_quantity=_parse_quantity(item.get("grossQuantity", 0)),
        ))
    return records
