"""Session: binds a child stream and its record pipeline to a presentation surface.

// [LAW:single-enforcer] Session is the only writer of its surface's history.
// [LAW:no-shared-mutable-globals] Pending-line state lives in the session's own
//   RecordPipeline; two sessions never share it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from cc_stream.core.surface import PromptSurface
from cc_stream.io.process_stream import DuplexStream, StreamUnavailable
from cc_stream.io.transcript import TranscriptRecorder
from cc_stream.pipeline.event_types import DecodeFailure
from cc_stream.pipeline.record_codec import encode_user_message
from cc_stream.pipeline.record_pipeline import RecordPipeline, RenderedRecord

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Session:
    """Wires a duplex stream through the record pipeline into a surface.

    Everything runs on the caller's thread: receive() processes a chunk to
    completion before returning, so records land in line order.
    """

    def __init__(
        self,
        stream: DuplexStream | None = None,
        surface: PromptSurface | None = None,
        *,
        name: str = "unnamed-session",
        recorder: TranscriptRecorder | None = None,
        on_decode_failure: Callable[[DecodeFailure], None] | None = None,
    ) -> None:
        self.name = name
        self.surface = surface if surface is not None else PromptSurface()
        self._stream = stream
        self._recorder = recorder
        self._on_decode_failure = on_decode_failure
        self._pipeline = RecordPipeline(on_decode_failure=self._report_failure)
        self.state = SessionState.IDLE

    @property
    def stream(self) -> DuplexStream | None:
        return self._stream

    @property
    def alive(self) -> bool:
        return self._stream is not None and self._stream.alive

    @property
    def failures(self) -> list[DecodeFailure]:
        return self._pipeline.failures

    @property
    def pending(self) -> str:
        return self._pipeline.pending

    def start(self, deliver: Callable[[bytes], None] | None = None) -> None:
        """Open the prompt and subscribe to the stream.

        `deliver` receives each raw chunk instead of receive(); callers on
        another event loop use it to marshal chunks back before calling
        receive() themselves.
        """
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"session {self.name!r} already {self.state.value}")
        if self._stream is not None:
            self._stream.on_data(deliver or self.receive)
        self.surface.insert_prompt()
        self.state = SessionState.RUNNING
        logger.info("session %s started (stream=%s)", self.name, self._stream is not None)

    def receive(self, chunk: bytes | str) -> list[RenderedRecord]:
        """Process one inbound chunk into the surface."""
        if self.state is SessionState.STOPPED:
            logger.debug("session %s stopped, dropping %d chars", self.name, len(chunk))
            return []
        if self._recorder is not None:
            self._recorder.on_raw(chunk)
        rendered = self._pipeline.feed(chunk)
        for item in rendered:
            if item.text is not None:
                self.surface.append_rendered_text(item.text)
        return rendered

    def send(self, text: str) -> None:
        """Write one user turn to the stream.

        Raises:
            StreamUnavailable: If there is no live process. Nothing is queued.
        """
        stream = self._stream
        if self.state is not SessionState.RUNNING or stream is None or not stream.alive:
            raise StreamUnavailable("no running claude process to send to")
        stream.write(encode_user_message(text))
        logger.debug("session %s sent %d chars", self.name, len(text))

    def submit(self) -> str | None:
        """Send the prompt's input; the surface only changes if the send succeeds."""
        return self.surface.submit_prompt(self.send)

    def stop(self) -> None:
        """Tear down: close the stream and drop pending partial input.

        The surface is kept so a stopped session's transcript stays readable.
        """
        if self.state is SessionState.STOPPED:
            return
        if self._stream is not None:
            self._stream.close()
        self._pipeline.reset()
        if self._recorder is not None:
            self._recorder.close()
        self.state = SessionState.STOPPED
        logger.info(
            "session %s stopped records=%d failures=%d",
            self.name,
            self._pipeline.records_seen,
            len(self._pipeline.failures),
        )

    def discard_surface(self) -> PromptSurface:
        """Replace the surface with an empty one; returns the new surface."""
        self.surface = PromptSurface()
        if self.state is SessionState.RUNNING:
            self.surface.insert_prompt()
        return self.surface

    def _report_failure(self, failure: DecodeFailure) -> None:
        if self._on_decode_failure is not None:
            self._on_decode_failure(failure)
