"""Logging bootstrap for cc-stream.

Two steps: resolve_runtime() turns environment and settings into a
LoggingRuntime value, configure() installs handlers for it on the
`cc_stream` logger. Module loggers (`logging.getLogger(__name__)`) and the
child process's stderr logger (CHILD_STDERR_LOGGER) all propagate there.

Environment (wins over settings):
    CC_STREAM_LOG_LEVEL   level name, default settings `log_level` or INFO
    CC_STREAM_LOG_DIR     directory for per-session files
    CC_STREAM_LOG_FILE    exact file path, overrides the directory

// [LAW:single-enforcer] Handler wiring happens in this module only.
// [LAW:one-source-of-truth] The active LoggingRuntime is the record of where logs go.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

import cc_stream.io.settings

LOGGER_NAME = "cc_stream"
CHILD_STDERR_LOGGER = "cc_stream.child.stderr"
DEFAULT_LOG_DIR = "~/.local/share/cc-stream/logs"

MAX_LOG_BYTES = 20 * 1024 * 1024
LOG_BACKUPS = 5

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"
CONSOLE_FORMAT = "[%(name)s] %(levelname)s %(message)s"


@dataclass(frozen=True)
class LoggingRuntime:
    """Where this run logs, and at what level."""

    level_name: str
    level: int
    file_path: str
    console: bool


_RUNTIME: LoggingRuntime | None = None


def _level_from_name(raw: object) -> int:
    level = logging.getLevelName(str(raw).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _session_file_name(session_name: str) -> str:
    slug = "".join(ch if ch.isalnum() or ch in "-_" else "-" for ch in session_name).strip("-_")
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"{slug or 'session'}-{stamp}-{os.getpid()}.log"


def resolve_runtime(session_name: str = "unnamed-session", console: bool = True) -> LoggingRuntime:
    """Work out level and file path without touching any logger."""
    raw_level = os.environ.get("CC_STREAM_LOG_LEVEL") or cc_stream.io.settings.load_setting(
        "log_level", "INFO"
    )
    level = _level_from_name(raw_level)

    file_path = os.environ.get("CC_STREAM_LOG_FILE")
    if not file_path:
        log_dir = os.path.expanduser(os.environ.get("CC_STREAM_LOG_DIR", DEFAULT_LOG_DIR))
        file_path = os.path.join(log_dir, _session_file_name(session_name))

    return LoggingRuntime(
        level_name=logging.getLevelName(level),
        level=level,
        file_path=file_path,
        console=console,
    )


def _handlers_for(runtime: LoggingRuntime) -> list[logging.Handler]:
    Path(runtime.file_path).parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        runtime.file_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]

    if runtime.console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers.append(console_handler)

    for handler in handlers:
        handler.setLevel(runtime.level)
    return handlers


def configure(session_name: str = "unnamed-session", console: bool = True) -> LoggingRuntime:
    """Install file (and optionally stderr) handlers on the cc_stream logger.

    Pass console=False while a full-screen UI owns the terminal.
    Only the first call has an effect; later calls return the same runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    runtime = resolve_runtime(session_name, console)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(runtime.level)
    logger.propagate = False
    logger.handlers.clear()
    for handler in _handlers_for(runtime):
        logger.addHandler(handler)

    logging.captureWarnings(True)
    _RUNTIME = runtime
    logger.debug("logging to %s at %s", runtime.file_path, runtime.level_name)
    return runtime


def get_runtime() -> LoggingRuntime | None:
    return _RUNTIME


def reset() -> None:
    """Drop handlers and forget the runtime (tests only)."""
    global _RUNTIME
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _RUNTIME = None
