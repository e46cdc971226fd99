"""Line reassembler: turns arbitrarily chunked stream output into protocol lines.

The child process writes one JSON document per line, but its stdout reaches
us in chunks that ignore line boundaries. The reassembler keeps the trailing
partial line until its newline arrives.

// [LAW:single-enforcer] Line framing happens here and nowhere else.
// [LAW:no-shared-mutable-globals] Each session owns its own reassembler.
"""

import codecs


class LineReassembler:
    """Accumulates chunks and yields complete, newline-stripped lines.

    Byte chunks are decoded as UTF-8 incrementally, so a multi-byte
    character split across two chunks is reassembled before framing.

    Usage::

        reassembler = LineReassembler()
        reassembler.feed('{"type": "sys')    # -> []
        reassembler.feed('tem"}\\n{"ty')      # -> ['{"type": "system"}']
        reassembler.pending                  # -> '{"ty'
    """

    def __init__(self) -> None:
        self._pending = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def pending(self) -> str:
        """The incomplete trailing line, if any."""
        return self._pending

    def feed(self, chunk: bytes | str) -> list[str]:
        """Append a chunk and return the lines it completed, in arrival order.

        Lines that are empty or whitespace-only carry nothing and are dropped.
        """
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))

        segments = (self._pending + chunk).split("\n")
        # Last segment has not seen its newline yet (may be "").
        self._pending = segments.pop()
        return [segment for segment in segments if segment.strip()]

    def reset(self) -> None:
        """Discard any partial line and partially decoded bytes."""
        self._pending = ""
        self._decoder.reset()
