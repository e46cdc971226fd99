"""Value types for the stream-json record pipeline.

// [LAW:one-source-of-truth] Known record discriminants are enumerated once, here.
// [LAW:dataflow-not-control-flow] Decode failures are values, not exceptions.
"""

from dataclasses import dataclass
from enum import Enum


# ─── Type aliases ─────────────────────────────────────────────────────────────

JsonDict = dict[str, object]

# A decoded record: one JSON object per protocol line.
Record = JsonDict

# None means "nothing to display for this record".
RenderedBlock = str | None


# ─── Enums ────────────────────────────────────────────────────────────────────


class RecordKind(Enum):
    """Known values of a record's `type` discriminant."""

    SYSTEM = "system"
    RESULT = "result"
    ASSISTANT = "assistant"
    USER = "user"


class ContentBlockType(Enum):
    """Content block type inside `message.content`."""

    TEXT = "text"


# ─── Failures ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DecodeFailure:
    """A protocol line that could not be decoded into a record."""

    line: str
    error: str

    def summary(self, limit: int = 80) -> str:
        """Short one-line description for operator-facing channels."""
        preview = self.line if len(self.line) <= limit else self.line[:limit] + "…"
        return f"{self.error}: {preview!r}"
