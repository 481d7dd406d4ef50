"""
Status-bar multiplexer.

Relays the output of an i3bar status-line command (i3status by default) and
prepends a Copilot usage element to every frame. Usage is refreshed on its own
interval, checked whenever a frame arrives, so several frames can share one
fetch.

States:
1. Prologue - write the protocol header and opening bracket once
2. Launch - start the status-line command with stdout piped
3. Streaming - classify, augment and re-emit each line
4. EOF - wait for the command and finish normally
"""

import logging
import os
import subprocess
import sys
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence, TextIO

from ..core.aggregator import Aggregate, aggregate
from ..core.errors import ExternalToolError, ExternalToolFailure
from ..display.status_element import render_status_element
from ..sdk.gh_client import GhClient
from .protocol import ARRAY_OPEN, HEADER, SEPARATOR, LineKind, classify_line, encode_frame

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 60.0


class UsageRefresher:
    """Fetches and aggregates the current billing period on demand.

    The username is looked up on the first call and reused afterwards.
    """

    def __init__(
        self,
        client: GhClient,
        limit: int,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.limit = limit
        self.now = now or (lambda: datetime.now(timezone.utc))
        self.username: Optional[str] = None

    def __call__(self) -> Aggregate:
        if self.username is None:
            self.username = self.client.current_username()
        current = self.now()
        snapshot = self.client.fetch_usage(self.username, current.year, current.month)
        return aggregate(snapshot, self.limit)


class StatusBarMultiplexer:
    """Relays a status-line stream with a usage element injected first."""

    def __init__(
        self,
        command: Sequence[str],
        refresh: Callable[[], Aggregate],
        interval: float = DEFAULT_REFRESH_INTERVAL,
        out: Optional[TextIO] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the multiplexer.

        Args:
            command: Status-line command and arguments; ~ is expanded
            refresh: Returns a fresh Aggregate, raising ExternalToolError on failure
            interval: Minimum seconds between refreshes
            out: Stream the protocol is written to (defaults to stdout)
            clock: Monotonic clock in seconds

        Raises:
            ValueError: If command is empty or interval is not positive
        """
        if not command:
            raise ValueError("command is required and cannot be empty")
        if interval <= 0:
            raise ValueError("interval must be > 0")

        self.command = [os.path.expanduser(arg) for arg in command]
        self.refresh = refresh
        self.interval = interval
        self.out = out
        self.clock = clock
        self.cached: Optional[Aggregate] = None
        self.last_fetch: Optional[float] = None
        self.frames_emitted = 0
        self.prologue_emitted = False

    def _write(self, line: str) -> None:
        out = self.out if self.out is not None else sys.stdout
        buffer = getattr(out, "buffer", None)
        if buffer is None:
            out.write(line + "\n")
            out.flush()
            return
        # Bytes the command wrote that were not UTF-8 go back out unchanged
        out.flush()
        buffer.write((line + "\n").encode("utf-8", "surrogateescape"))
        buffer.flush()

    def emit_prologue(self) -> None:
        """Write the protocol header; later calls are no-ops."""
        if self.prologue_emitted:
            return
        self._write(HEADER)
        self._write(ARRAY_OPEN)
        self.prologue_emitted = True

    def launch(self) -> subprocess.Popen:
        """Start the status-line command.

        Raises:
            ExternalToolError: If the command cannot be started
        """
        logger.debug("Starting %s", " ".join(self.command))
        try:
            return subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
                bufsize=1,
            )
        except OSError as e:
            raise ExternalToolError(
                f"Error starting {self.command[0]}: {e}",
                ExternalToolFailure.LAUNCH,
            )

    def current_aggregate(self) -> Aggregate:
        """Return cached usage, refreshing it when missing or expired.

        A failed refresh keeps the previous value; the fetch timestamp only
        moves on success, so the next frame retries.

        Raises:
            ExternalToolError: If the refresh fails and nothing is cached yet
        """
        now = self.clock()
        if self.cached is not None and now - self.last_fetch < self.interval:
            return self.cached

        try:
            fresh = self.refresh()
        except ExternalToolError as e:
            if self.cached is None:
                raise
            logger.warning("Usage refresh failed, keeping previous value: %s", e)
        else:
            self.cached = fresh
            self.last_fetch = now
        return self.cached

    def process_line(self, line: str) -> Optional[str]:
        """Turn one input line into the line to emit, or None to drop it."""
        status = classify_line(line)
        if not status.is_frame:
            return None

        usage = self.current_aggregate()
        if status.kind == LineKind.CONTENT:
            body = encode_frame([render_status_element(usage), *status.elements])
        else:
            logger.debug("Passing through unparseable frame: %r", status.body)
            body = status.body

        prefix = SEPARATOR if self.frames_emitted else ""
        self.frames_emitted += 1
        return prefix + body

    def relay(self, lines: Iterable[str]) -> None:
        for line in lines:
            frame = self.process_line(line)
            if frame is not None:
                self._write(frame)

    def run(self) -> int:
        """Run until the status-line command closes its output.

        Returns:
            0 once the command's output ends

        Raises:
            ExternalToolError: If the command cannot be started, or the first
                usage fetch fails
        """
        self.emit_prologue()
        proc = self.launch()
        with proc:
            try:
                self.relay(iter(proc.stdout.readline, ""))
            except Exception:
                proc.terminate()
                raise
        logger.debug("%s exited with status %s", self.command[0], proc.returncode)
        return 0

