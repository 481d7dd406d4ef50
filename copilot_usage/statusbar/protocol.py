"""
i3bar protocol line handling.

The status-line command writes a header line, an opening bracket, then one
JSON array of status elements per line. Every array after the first carries a
leading comma.
"""

import json
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from ..core.errors import ProtocolParseError

HEADER = '{"version":1}'
ARRAY_OPEN = "["
SEPARATOR = ","


class LineKind(Enum):
    """Classification of one line read from the status-line command."""
    BLANK = auto()
    PREAMBLE = auto()    # Header echoed by the command
    ARRAY_OPEN = auto()  # Opening bracket of the infinite array
    CONTENT = auto()     # A parsed array of status elements
    MALFORMED = auto()   # Content we could not parse, passed through as-is


@dataclass(frozen=True)
class StatusLine:
    """One classified line.

    body is the line with surrounding whitespace and any leading separator
    removed; elements is set only for CONTENT lines.
    """
    kind: LineKind
    body: str = ""
    continuation: bool = False
    elements: Optional[List[Dict[str, Any]]] = None

    @property
    def is_frame(self) -> bool:
        return self.kind in (LineKind.CONTENT, LineKind.MALFORMED)


def parse_elements(body: str) -> List[Dict[str, Any]]:
    """Parse a frame body as a list of status element objects.

    Raises:
        ProtocolParseError: If the body is not a JSON array of objects
    """
    try:
        body.encode("utf-8")
    except UnicodeEncodeError:
        raise ProtocolParseError("Frame is not valid UTF-8")
    try:
        elements = json.loads(body)
    except json.JSONDecodeError as e:
        raise ProtocolParseError(f"Frame is not valid JSON: {e}")
    if not isinstance(elements, list):
        raise ProtocolParseError("Frame is not a JSON array")
    if not all(isinstance(element, dict) for element in elements):
        raise ProtocolParseError("Frame contains a non-object element")
    return elements


def _is_header(line: str) -> bool:
    if line == HEADER:
        return True
    if not line.startswith("{"):
        return False
    try:
        header = json.loads(line)
    except json.JSONDecodeError:
        return False
    return isinstance(header, dict) and "version" in header


def classify_line(line: str) -> StatusLine:
    """Classify one raw line of status-line output."""
    stripped = line.strip()
    if not stripped:
        return StatusLine(LineKind.BLANK)
    if stripped == ARRAY_OPEN:
        return StatusLine(LineKind.ARRAY_OPEN, stripped)
    if _is_header(stripped):
        return StatusLine(LineKind.PREAMBLE, stripped)

    continuation = stripped.startswith(SEPARATOR)
    body = stripped[1:] if continuation else stripped
    try:
        elements = parse_elements(body)
    except ProtocolParseError:
        return StatusLine(LineKind.MALFORMED, body, continuation)
    return StatusLine(LineKind.CONTENT, body, continuation, elements)


def encode_frame(elements: List[Dict[str, Any]]) -> str:
    """Serialize elements compactly, keeping non-ASCII glyphs as-is."""
    return json.dumps(elements, separators=(",", ":"), ensure_ascii=False)
