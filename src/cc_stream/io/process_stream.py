"""Claude child process as a duplex byte stream.

Holds live subprocess references.
Import as: import cc_stream.io.process_stream

// [LAW:single-enforcer] ClaudeProcess is the sole owner of the child process.
// [LAW:locality-or-seam] All subprocess and thread logic is isolated here;
//   the rest of the app sees write/on_data/close/alive.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from collections.abc import Callable, Sequence
from typing import Protocol

from cc_stream.io.logging_setup import CHILD_STDERR_LOGGER

logger = logging.getLogger(__name__)
child_stderr = logging.getLogger(CHILD_STDERR_LOGGER)

# Fixed protocol flags: stream-json in both directions, one record per line.
STREAM_JSON_FLAGS: tuple[str, ...] = (
    "-p",
    "--input-format",
    "stream-json",
    "--output-format",
    "stream-json",
    "--verbose",
)

READ_SIZE = 64 * 1024
TERMINATE_TIMEOUT_SECONDS = 3.0


class StreamUnavailable(RuntimeError):
    """A send was attempted with no live process on the other end."""


class ProcessStartError(StreamUnavailable):
    """The child process could not be spawned."""


class DuplexStream(Protocol):
    """What a session needs from its transport."""

    @property
    def alive(self) -> bool: ...

    def write(self, data: bytes) -> None: ...

    def on_data(self, callback: Callable[[bytes], None]) -> None: ...

    def close(self) -> None: ...


def build_command(command: Sequence[str], extra_args: Sequence[str] = ()) -> list[str]:
    """Full argv: executable (plus its own args), protocol flags, extra args."""
    return [*command, *STREAM_JSON_FLAGS, *extra_args]


class ClaudeProcess:
    """Spawns the child and pumps its stdout to data callbacks.

    Stdout is read on a daemon thread; callbacks run on that thread, so
    UI callers must marshal chunks onto their own loop. Stderr lines are
    logged at WARNING on the child stderr logger.
    """

    def __init__(
        self,
        argv: Sequence[str],
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._argv = list(argv)
        self._cwd = cwd
        self._env = env
        self._proc: subprocess.Popen | None = None
        self._data_callbacks: list[Callable[[bytes], None]] = []
        self._exit_callbacks: list[Callable[[int | None], None]] = []
        self._threads: list[threading.Thread] = []
        self._write_lock = threading.Lock()
        self._closing = False

    @property
    def argv(self) -> list[str]:
        return list(self._argv)

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc is not None else None

    @property
    def alive(self) -> bool:
        return self._proc is not None and self._proc.poll() is None and not self._closing

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode if self._proc is not None else None

    def on_data(self, callback: Callable[[bytes], None]) -> None:
        self._data_callbacks.append(callback)

    def on_exit(self, callback: Callable[[int | None], None]) -> None:
        self._exit_callbacks.append(callback)

    def start(self) -> None:
        if self._proc is not None:
            raise RuntimeError("process already started")
        env = os.environ.copy()
        if self._env:
            env.update(self._env)
        try:
            self._proc = subprocess.Popen(
                self._argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
                cwd=self._cwd,
                env=env,
            )
        except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
            raise ProcessStartError(f"cannot start {self._argv[0]!r}: {e}") from e

        logger.info("started pid=%s argv=%s cwd=%s", self._proc.pid, self._argv, self._cwd)
        proc = self._proc
        self._spawn_thread(lambda: self._pump_stdout(proc), "stdout")
        self._spawn_thread(lambda: self._pump_stderr(proc), "stderr")

    def _spawn_thread(self, target: Callable[[], None], name: str) -> None:
        thread = threading.Thread(target=target, name=f"claude-{name}", daemon=True)
        self._threads.append(thread)
        thread.start()

    def _pump_stdout(self, proc: subprocess.Popen) -> None:
        fd = proc.stdout.fileno()
        while True:
            try:
                chunk = os.read(fd, READ_SIZE)
            except OSError:
                break
            if not chunk:
                break
            for callback in list(self._data_callbacks):
                callback(chunk)

        returncode = proc.wait()
        logger.info("process exited pid=%s returncode=%s", proc.pid, returncode)
        for callback in list(self._exit_callbacks):
            callback(returncode)

    def _pump_stderr(self, proc: subprocess.Popen) -> None:
        for raw in iter(proc.stderr.readline, b""):
            line = raw.decode("utf-8", errors="replace").rstrip()
            if line:
                child_stderr.warning("%s", line)

    def write(self, data: bytes) -> None:
        """Write to the child's stdin. Raises StreamUnavailable if it is gone."""
        proc = self._proc
        if proc is None or proc.stdin is None or not self.alive:
            raise StreamUnavailable("claude process is not running")
        with self._write_lock:
            try:
                proc.stdin.write(data)
                proc.stdin.flush()
            except (BrokenPipeError, ValueError, OSError) as e:
                raise StreamUnavailable(f"claude process closed its input: {e}") from e

    def close(self) -> None:
        """Stop the child and the pump threads. Safe to call more than once."""
        proc = self._proc
        if proc is None or self._closing:
            return
        self._closing = True
        if proc.stdin is not None:
            try:
                proc.stdin.close()
            except OSError:
                pass
        if proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=TERMINATE_TIMEOUT_SECONDS)
            except subprocess.TimeoutExpired:
                logger.warning("pid=%s ignored SIGTERM, killing", proc.pid)
                proc.kill()
                proc.wait()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join(timeout=TERMINATE_TIMEOUT_SECONDS)
        for pipe in (proc.stdout, proc.stderr):
            if pipe is not None:
                pipe.close()
        logger.info("closed pid=%s returncode=%s", proc.pid, proc.returncode)
