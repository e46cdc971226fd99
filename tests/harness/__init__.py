"""Test harness for cc-stream.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, FakeStream, make_line, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.builders import (
    TRANSCRIPT_RENDERED,
    make_assistant_record,
    make_line,
    make_result_record,
    make_system_record,
    make_tool_result_record,
    make_transcript,
    split_every,
)
from tests.harness.fakes import FakeStream

__all__ = [
    "run_app",
    "FakeStream",
    "TRANSCRIPT_RENDERED",
    "make_assistant_record",
    "make_line",
    "make_result_record",
    "make_system_record",
    "make_tool_result_record",
    "make_transcript",
    "split_every",
]
