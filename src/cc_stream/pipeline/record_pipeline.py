"""Record pipeline: reassemble → decode → dispatch for one inbound stream.

// [LAW:locality-or-seam] Per-record failures are contained here; nothing past
//   feed() ever sees a malformed line.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from cc_stream.pipeline.dispatcher import dispatch
from cc_stream.pipeline.event_types import DecodeFailure, Record
from cc_stream.pipeline.line_reassembler import LineReassembler
from cc_stream.pipeline.record_codec import decode_record, scrub_surrogates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedRecord:
    """A decoded record and its rendered text (None = nothing to show)."""

    record: Record
    text: str | None


class RecordPipeline:
    """Turns raw stream chunks into rendered records, in line order."""

    def __init__(
        self,
        on_decode_failure: Callable[[DecodeFailure], None] | None = None,
    ) -> None:
        self._reassembler = LineReassembler()
        self._on_decode_failure = on_decode_failure
        self.failures: list[DecodeFailure] = []
        self.records_seen = 0

    @property
    def pending(self) -> str:
        return self._reassembler.pending

    def feed(self, chunk: bytes | str) -> list[RenderedRecord]:
        """Process one chunk; returns every record whose line it completed."""
        rendered: list[RenderedRecord] = []
        for line in self._reassembler.feed(chunk):
            decoded = decode_record(line)
            if isinstance(decoded, DecodeFailure):
                self._report(decoded)
                continue
            self.records_seen += 1
            text = dispatch(decoded)
            if text is not None:
                text = scrub_surrogates(text)
            rendered.append(RenderedRecord(record=decoded, text=text))
        return rendered

    def reset(self) -> None:
        self._reassembler.reset()

    def _report(self, failure: DecodeFailure) -> None:
        self.failures.append(failure)
        logger.warning("dropping undecodable line: %s", failure.summary())
        if self._on_decode_failure is not None:
            self._on_decode_failure(failure)
