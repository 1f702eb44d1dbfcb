"""
Framing stages for the board server event stream.

The server writes one ``data: <json>`` record per run event and ends every record
with a blank line. The network hands those records over in arbitrary text
fragments, so a record may be split across fragments and a fragment may hold
several records.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
RECORD_DELIMITER = "\n\n"


def strip_data_prefix(fragment: Any) -> str | None:
    """
    Remove the ``data: `` framing prefix from one fragment.

    Args:
        fragment: Text handed over by the previous stage.

    Returns:
        The fragment without its prefix, the fragment unchanged when it has no
        prefix, or None when it is blank (nothing to forward).
    """
    text = fragment if isinstance(fragment, str) else str(fragment)
    if not text.strip():
        return None
    if text.startswith(DATA_PREFIX):
        return text[len(DATA_PREFIX):]
    logger.warning("Received SSE chunk without data prefix: %r", text)
    return text


class ChunkReassembler:
    """
    Re-cuts arbitrary text fragments into complete, delimiter-terminated records.

    One instance serves one stream. It keeps at most one partial record between
    calls to :meth:`feed`; the partial is never shared with another stream.
    """

    def __init__(self) -> None:
        self._pending: str | None = None

    @property
    def pending(self) -> str | None:
        """Partial record waiting for its delimiter, if any."""
        return self._pending

    def feed(self, fragment: Any) -> list[str]:
        """
        Consume one fragment and return the records it completes.

        Every returned record ends with ``RECORD_DELIMITER``. The records come out
        in the same order regardless of where the fragment boundaries fell.
        """
        text = fragment if isinstance(fragment, str) else str(fragment)

        missing_end_marker = not text.endswith(RECORD_DELIMITER)
        segments = text.split(RECORD_DELIMITER)
        if not missing_end_marker:
            # Nothing follows the last delimiter.
            segments.pop()

        complete: list[str] = []
        last = len(segments) - 1
        for i, segment in enumerate(segments):
            is_tail = missing_end_marker and i == last

            if self._pending is None:
                if is_tail:
                    self._pending = segment or None
                else:
                    complete.append(segment)
                continue

            # The pending partial plus this segment may close more than one record,
            # including one whose delimiter straddles the fragment boundary.
            pieces = (self._pending + segment).split(RECORD_DELIMITER)
            if is_tail:
                self._pending = pieces.pop() or None
            else:
                self._pending = None
            complete.extend(pieces)

        return [record + RECORD_DELIMITER for record in complete]

    def flush(self) -> str | None:
        """Return and clear the dangling partial record left at end of stream."""
        pending, self._pending = self._pending, None
        return pending
