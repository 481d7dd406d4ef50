"""
Error taxonomy.

Every failure the tool reports derives from CopilotUsageError so the CLI can
route it to stderr and exit non-zero without mixing it into primary output.
"""

from enum import Enum
from typing import Optional


class CopilotUsageError(Exception):
    """Base class for all reportable failures."""


class ConfigurationError(CopilotUsageError):
    """Raised for an unknown explicit plan, a non-positive limit or a bad config file."""


class ExternalToolFailure(Enum):
    """Distinct ways an external command can fail."""
    LAUNCH = "launch"        # Could not be started (missing, OS error, timeout)
    EXIT = "exit"            # Ran but exited non-zero
    MALFORMED = "malformed"  # Ran but produced output we cannot parse


class ExternalToolError(CopilotUsageError):
    """Raised when an external command (gh, i3status) fails.

    hint, when set, is guidance shown to the user below the error.
    """
    def __init__(self, message: str, kind: ExternalToolFailure, hint: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.hint = hint


class ProtocolParseError(CopilotUsageError):
    """Raised when a status-line frame is not a JSON array of objects.

    Never fatal: callers pass the frame through unmodified.
    """
