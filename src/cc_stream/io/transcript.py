"""Raw transcript recording and replay.

A transcript is the child's stdout exactly as received: a stream-json
(.jsonl) file. Replaying one feeds it back in fixed-size chunks, so the
reassembler sees the same kind of misaligned fragments a live process sends.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_REPLAY_CHUNK_SIZE = 4096


class TranscriptRecorder:
    """Appends raw inbound chunks to a file, flushed per chunk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("ab")
        self.bytes_written = 0
        logger.info("recording transcript to %s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def on_raw(self, data: bytes | str) -> None:
        if self._file.closed:
            return
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._file.write(data)
        self._file.flush()
        self.bytes_written += len(data)

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            logger.info("transcript closed path=%s bytes=%d", self._path, self.bytes_written)


def iter_transcript_chunks(
    path: str | Path, chunk_size: int = DEFAULT_REPLAY_CHUNK_SIZE
) -> Iterator[bytes]:
    """Yield a recorded transcript as raw byte chunks.

    Raises:
        FileNotFoundError: If the transcript doesn't exist
        ValueError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                return
            yield chunk
