"""Presentation surface: transcript history plus one editable prompt at the tail.

The surface is a single growing text split in two zones:

    [ history ............ ][ "> " ][ input ... ]
    0                  boundary  input_start   len(text)

History is immutable once written and `boundary` never moves backwards.
Only the input region after the prompt marker is editable. `cursor` is the
externally visible cursor offset, kept independent of both.

Every operation is a pure function SurfaceState -> SurfaceState.
PromptSurface holds the current value, applies the functions and notifies
observers, so widgets only ever mirror a state.

// [LAW:one-source-of-truth] SurfaceState is the sole state of the transcript.
// [LAW:dataflow-not-control-flow] Edits are values in, values out.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

PROMPT_MARKER = "> "
USER_ECHO_PREFIX = "You: "


class ReadOnlyRegionError(ValueError):
    """An edit targeted the history zone or the prompt marker."""


@dataclass(frozen=True)
class SurfaceState:
    text: str = ""
    boundary: int = 0
    input_start: int = 0
    cursor: int = 0
    prompt_active: bool = False

    @property
    def end(self) -> int:
        return len(self.text)

    @property
    def history(self) -> str:
        return self.text[: self.boundary]

    @property
    def input_text(self) -> str:
        if not self.prompt_active:
            return ""
        return self.text[self.input_start :]

    @property
    def cursor_at_end(self) -> bool:
        return self.cursor == self.end

    def is_editable(self, offset: int) -> bool:
        return self.prompt_active and self.input_start <= offset <= self.end


# ─── Pure transformations ────────────────────────────────────────────────────


def insert_prompt(state: SurfaceState) -> SurfaceState:
    """Start a fresh prompt at the tail of the surface.

    Everything before the marker becomes history. A prompt that is already
    active with an empty input region is left as is.
    """
    if state.prompt_active and state.input_start == state.end:
        return state

    text = state.text
    if text and not text.endswith("\n"):
        text += "\n"
    boundary = len(text)
    text += PROMPT_MARKER
    return SurfaceState(
        text=text,
        boundary=boundary,
        input_start=len(text),
        cursor=len(text),
        prompt_active=True,
    )


def append_rendered_text(state: SurfaceState, rendered: str) -> SurfaceState:
    """Insert rendered text at the history/prompt boundary, above the prompt.

    A cursor sitting at the absolute end follows the new end; any other
    cursor keeps its absolute offset.
    """
    if not rendered:
        return state

    at = state.boundary if state.prompt_active else state.end
    text = state.text[:at] + rendered + state.text[at:]
    shift = len(rendered)
    cursor = len(text) if state.cursor_at_end else state.cursor

    if not state.prompt_active:
        return replace(
            state, text=text, boundary=len(text), input_start=len(text), cursor=cursor
        )
    return replace(
        state,
        text=text,
        boundary=state.boundary + shift,
        input_start=state.input_start + shift,
        cursor=cursor,
    )


def submit_prompt(state: SurfaceState) -> tuple[SurfaceState, str | None]:
    """Move the composed input into history and open a new prompt.

    Returns the new state and the trimmed input, or the unchanged state and
    None when there is nothing to send.
    """
    submitted = state.input_text.strip()
    if not submitted:
        return state, None

    line_start = state.text.rfind("\n", 0, state.input_start) + 1
    line_start = max(line_start, state.boundary)
    text = state.text[:line_start] + USER_ECHO_PREFIX + submitted + "\n\n"
    staged = SurfaceState(
        text=text,
        boundary=len(text),
        input_start=len(text),
        cursor=len(text),
    )
    return insert_prompt(staged), submitted


def set_input(state: SurfaceState, value: str) -> SurfaceState:
    """Replace the whole input region; the cursor lands at its end."""
    if not state.prompt_active:
        raise ReadOnlyRegionError("no active prompt")
    text = state.text[: state.input_start] + value
    return replace(state, text=text, cursor=len(text))


def insert_text(state: SurfaceState, offset: int, value: str) -> SurfaceState:
    """Insert into the input region at an absolute offset."""
    if not state.is_editable(offset):
        raise ReadOnlyRegionError(f"offset {offset} is outside the input region")
    text = state.text[:offset] + value + state.text[offset:]
    cursor = state.cursor + len(value) if state.cursor >= offset else state.cursor
    return replace(state, text=text, cursor=cursor)


def delete_range(state: SurfaceState, start: int, end: int) -> SurfaceState:
    """Delete [start, end) from the input region."""
    if start > end or not (state.is_editable(start) and state.is_editable(end)):
        raise ReadOnlyRegionError(f"range {start}:{end} is outside the input region")
    text = state.text[:start] + state.text[end:]
    if state.cursor >= end:
        cursor = state.cursor - (end - start)
    elif state.cursor > start:
        cursor = start
    else:
        cursor = state.cursor
    return replace(state, text=text, cursor=cursor)


def move_cursor(state: SurfaceState, offset: int) -> SurfaceState:
    return replace(state, cursor=max(0, min(offset, state.end)))


# ─── Stateful holder ─────────────────────────────────────────────────────────


class PromptSurface:
    """Current SurfaceState plus change notification.

    Usage::

        surface = PromptSurface()
        surface.insert_prompt()
        surface.append_rendered_text("hi\\n\\n")
        surface.set_input("hello")
        surface.submit_prompt(send=stream_writer)
    """

    def __init__(self, state: SurfaceState | None = None) -> None:
        self._state = state or SurfaceState()
        self._subscribers: list[Callable[[SurfaceState], None]] = []

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def text(self) -> str:
        return self._state.text

    @property
    def history(self) -> str:
        return self._state.history

    @property
    def input_text(self) -> str:
        return self._state.input_text

    @property
    def cursor(self) -> int:
        return self._state.cursor

    def subscribe(self, callback: Callable[[SurfaceState], None]) -> Callable[[], None]:
        """Call `callback(state)` after every change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _apply(self, state: SurfaceState) -> None:
        if state == self._state:
            return
        self._state = state
        for callback in list(self._subscribers):
            callback(state)

    def insert_prompt(self) -> None:
        self._apply(insert_prompt(self._state))

    def append_rendered_text(self, rendered: str) -> None:
        self._apply(append_rendered_text(self._state, rendered))

    def submit_prompt(self, send: Callable[[str], None]) -> str | None:
        """Submit the input through `send`, then record it in history.

        `send` runs before the surface changes: if it raises, the surface is
        left exactly as it was and the exception propagates.
        """
        state, submitted = submit_prompt(self._state)
        if submitted is None:
            return None
        send(submitted)
        self._apply(state)
        return submitted

    def set_input(self, value: str) -> None:
        self._apply(set_input(self._state, value))

    def insert_text(self, offset: int, value: str) -> None:
        self._apply(insert_text(self._state, offset, value))

    def delete_range(self, start: int, end: int) -> None:
        self._apply(delete_range(self._state, start, end))

    def move_cursor(self, offset: int) -> None:
        self._apply(move_cursor(self._state, offset))
