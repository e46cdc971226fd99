"""In-memory DuplexStream for tests: records writes, pushes chunks on demand."""

from collections.abc import Callable

from cc_stream.io.process_stream import StreamUnavailable


class FakeStream:
    def __init__(self, alive: bool = True) -> None:
        self.alive = alive
        self.written: list[bytes] = []
        self.closed = False
        self._callbacks: list[Callable[[bytes], None]] = []

    def on_data(self, callback: Callable[[bytes], None]) -> None:
        self._callbacks.append(callback)

    def write(self, data: bytes) -> None:
        if not self.alive:
            raise StreamUnavailable("fake stream is down")
        self.written.append(data)

    def close(self) -> None:
        self.closed = True
        self.alive = False

    def push(self, data: bytes | str) -> None:
        """Deliver a chunk as if the child had written it."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        for callback in list(self._callbacks):
            callback(data)
