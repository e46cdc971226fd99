"""Settings file I/O and launch configuration for cc-stream.

Manages a JSON settings file at XDG_CONFIG_HOME/cc-stream/settings.json.
Recognized keys: `claude_command` (str), `extra_args` (str, shell-quoted),
`replay_chunk_size` (int), `log_level` (str). Unknown keys are preserved on save.

Import as: import cc_stream.io.settings

// [LAW:one-source-of-truth] Launch command resolution lives in resolve_launch_config.
"""

from __future__ import annotations

import json
import logging
import os
import shlex
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_COMMAND = "claude"
CLAUDE_COMMAND_ENV = "CC_STREAM_CLAUDE_COMMAND"


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / cc-stream / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "cc-stream" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("ignoring unreadable settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single setting by key. Returns default if absent."""
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Save a single setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)


# ─── Launch configuration ────────────────────────────────────────────────────


@dataclass(frozen=True)
class LaunchConfig:
    """How to spawn the child: executable argv, extra flags, working directory."""

    command: tuple[str, ...] = (DEFAULT_CLAUDE_COMMAND,)
    extra_args: tuple[str, ...] = ()
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)


def _split(value: object) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(part) for part in value)
    return tuple(shlex.split(str(value or "")))


def resolve_launch_config(
    command: str | None = None,
    extra_args: str | None = None,
    cwd: str | None = None,
) -> LaunchConfig:
    """Resolve launch settings: explicit args, then env, then settings file."""
    settings = load_settings()
    raw_command = (
        command
        or os.environ.get(CLAUDE_COMMAND_ENV)
        or settings.get("claude_command")
        or DEFAULT_CLAUDE_COMMAND
    )
    argv = _split(raw_command) or (DEFAULT_CLAUDE_COMMAND,)
    raw_extra = extra_args if extra_args is not None else settings.get("extra_args", "")
    resolved_cwd = os.path.abspath(os.path.expanduser(cwd)) if cwd else os.getcwd()
    return LaunchConfig(command=argv, extra_args=_split(raw_extra), cwd=resolved_cwd)
