"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin adapter. The Session owns the pipeline and the
//   PromptSurface owns transcript state; widgets only mirror the surface.
// [LAW:single-enforcer] Stream chunks reach the session only through
//   on_stream_chunk, on the app's message pump.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Footer, Header, Input, TextArea

from cc_stream.app.session import Session
from cc_stream.core.surface import SurfaceState
from cc_stream.io.process_stream import (
    ClaudeProcess,
    DuplexStream,
    StreamUnavailable,
    build_command,
)
from cc_stream.io.settings import LaunchConfig
from cc_stream.io.transcript import (
    DEFAULT_REPLAY_CHUNK_SIZE,
    TranscriptRecorder,
    iter_transcript_chunks,
)
from cc_stream.pipeline.event_types import DecodeFailure

logger = logging.getLogger(__name__)

StreamFactory = Callable[[], DuplexStream]


class StreamChunk(Message, bubble=False):
    """Thread-safe bridge: stdout pump thread → app message pump."""

    def __init__(self, generation: int, data: bytes) -> None:
        self.generation = generation
        self.data = data
        super().__init__()


class StreamClosed(Message, bubble=False):
    """The child process exited."""

    def __init__(self, generation: int, returncode: int | None) -> None:
        self.generation = generation
        self.returncode = returncode
        super().__init__()


def process_stream_factory(config: LaunchConfig) -> StreamFactory:
    def factory() -> DuplexStream:
        return ClaudeProcess(
            build_command(config.command, config.extra_args),
            cwd=config.cwd,
            env=config.env or None,
        )

    return factory


class CcStreamApp(App):
    """TUI application for cc-stream."""

    TITLE = "cc-stream"

    CSS = """
    #transcript {
        height: 1fr;
    }
    #prompt {
        height: auto;
    }
    """

    BINDINGS = [
        Binding("ctrl+r", "restart", "Restart session"),
        Binding("ctrl+l", "discard", "Clear transcript"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        stream_factory: StreamFactory | None = None,
        *,
        session_name: str = "unnamed-session",
        replay_path: str | None = None,
        record_path: str | None = None,
        replay_chunk_size: int = DEFAULT_REPLAY_CHUNK_SIZE,
    ) -> None:
        super().__init__()
        self._stream_factory = stream_factory
        self._session_name = session_name
        self._replay_path = replay_path
        self._record_path = record_path
        self._replay_chunk_size = replay_chunk_size
        self._generation = 0
        self._unsubscribe: Callable[[], None] | None = None
        self.session: Session | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield TextArea("", id="transcript", read_only=True, soft_wrap=True)
        yield Input(placeholder="Message Claude (Enter to send)", id="prompt")
        yield Footer()

    def on_mount(self) -> None:
        self._start_session()
        if self._replay_path is not None:
            self._replay(self._replay_path)
        self.query_one("#prompt", Input).focus()

    def on_unmount(self) -> None:
        if self.session is not None:
            self.session.stop()

    # ─── Session lifecycle ───────────────────────────────────────────────────

    def _start_session(self) -> None:
        previous = self.session
        self._generation += 1
        generation = self._generation

        stream = self._stream_factory() if self._stream_factory is not None else None
        recorder = TranscriptRecorder(self._record_path) if self._record_path else None
        self.session = Session(
            stream,
            surface=previous.surface if previous is not None else None,
            name=self._session_name,
            recorder=recorder,
            on_decode_failure=self._on_decode_failure,
        )
        self._watch_surface()
        self.session.start(
            deliver=lambda data: self.post_message(StreamChunk(generation, data))
        )

        if isinstance(stream, ClaudeProcess):
            stream.on_exit(lambda rc: self.post_message(StreamClosed(generation, rc)))
            try:
                stream.start()
            except StreamUnavailable as e:
                logger.error("%s", e)
                self.notify(str(e), title="Cannot start claude", severity="error")
                self.sub_title = "not running"
                return
            self.sub_title = f"pid {stream.pid}"
        elif stream is None:
            self.sub_title = "replay" if self._replay_path else "no process"

    def _replay(self, path: str) -> None:
        try:
            for chunk in iter_transcript_chunks(path, self._replay_chunk_size):
                self.session.receive(chunk)
        except OSError as e:
            self.notify(str(e), title="Replay failed", severity="error")

    def _watch_surface(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        surface = self.session.surface
        self._unsubscribe = surface.subscribe(self._mirror_surface)
        self._mirror_surface(surface.state)

    def action_restart(self) -> None:
        if self.session is not None:
            self.session.stop()
        self._start_session()
        self.notify("Session restarted")

    def action_discard(self) -> None:
        if self.session is None:
            return
        self.session.discard_surface()
        self._watch_surface()
        self.query_one("#prompt", Input).value = ""

    # ─── Stream events ───────────────────────────────────────────────────────

    def on_stream_chunk(self, message: StreamChunk) -> None:
        if message.generation != self._generation or self.session is None:
            return
        try:
            self.session.receive(message.data)
        except Exception as e:
            self._handle_exception(e)

    def on_stream_closed(self, message: StreamClosed) -> None:
        if message.generation != self._generation:
            return
        self.sub_title = f"exited ({message.returncode})"
        self.notify(
            f"claude exited with status {message.returncode}",
            severity="warning" if message.returncode else "information",
        )

    def _on_decode_failure(self, failure: DecodeFailure) -> None:
        self.notify(failure.summary(), title="Undecodable line", severity="warning")

    def _handle_exception(self, error: Exception) -> None:
        """Log and surface an unexpected error without taking the app down."""
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        logger.error("unhandled exception:\n%s", tb)
        self.notify(f"{type(error).__name__}: {error}", title="Error", severity="error")

    # ─── Prompt ──────────────────────────────────────────────────────────────

    def on_input_changed(self, event: Input.Changed) -> None:
        if self.session is not None and self.session.surface.state.prompt_active:
            self.session.surface.set_input(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if self.session is None:
            return
        try:
            submitted = self.session.submit()
        except StreamUnavailable as e:
            self.notify(str(e), title="Message not sent", severity="error")
            return
        if submitted is not None:
            event.input.value = ""

    # ─── Surface mirror ──────────────────────────────────────────────────────

    def _mirror_surface(self, state: SurfaceState) -> None:
        area = self.query_one("#transcript", TextArea)
        area.load_text(state.text)
        area.move_cursor(area.document.get_location_from_index(state.cursor))
        if state.cursor_at_end:
            area.scroll_cursor_visible()
