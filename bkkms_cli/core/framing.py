"""Line framing for the import event stream.

The server writes one event per ``data: <json>`` line.  Chunks arrive at
arbitrary byte offsets, so :class:`LineFramer` keeps the incomplete tail of
the last chunk (including half of a multi-byte character) until the rest of
the line shows up.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import List, Optional

from .models import ImportEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "


class LineFramer:
    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> List[str]:
        """Add ``chunk`` and return the lines it completed."""
        self._buffer += self._decoder.decode(chunk)
        if "\n" not in self._buffer:
            return []
        *lines, self._buffer = self._buffer.split("\n")
        return [_strip_cr(line) for line in lines]

    def flush(self) -> List[str]:
        """Return the trailing line left over at end of stream, if any."""
        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        return [_strip_cr(rest)] if rest else []

    @property
    def pending(self) -> str:
        return self._buffer


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def parse_event_line(line: str) -> Optional[ImportEvent]:
    """Decode one framed line.

    Lines without the ``data: `` prefix (keep-alives, comments, blank
    separators) yield ``None`` quietly.  A data line that does not decode to
    a known event is logged and also yields ``None``; one bad frame must not
    end the stream.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    try:
        data = json.loads(payload)
    except ValueError as e:
        logger.warning("Skipping malformed event %r: %s", payload[:200], e)
        return None
    if not isinstance(data, dict):
        logger.warning("Skipping non-object event %r", payload[:200])
        return None
    try:
        return ImportEvent.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning("Skipping unrecognised event %r: %s", payload[:200], e)
        return None
