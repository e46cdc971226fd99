"""Record renderers: pure functions from a decoded record to transcript text.

Each renderer returns a RenderedBlock: a string that already ends with its
own blank-line spacing, or None when the record has nothing to show.
Renderers are total: missing or mistyped fields mean "nothing to render".

// [LAW:dataflow-not-control-flow] Renderers never raise on partial records.
"""

from cc_stream.pipeline.event_types import ContentBlockType, Record, RenderedBlock
from cc_stream.pipeline.record_codec import encode_record

BLOCK_SEPARATOR = "\n\n"
ERROR_PREFIX = "ERROR: "
STDERR_LABEL = "STDERR:\n"


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _as_text(value: object) -> str:
    return value if isinstance(value, str) else ""


def render_system(record: Record) -> RenderedBlock:
    """System records are session metadata, never shown in the transcript."""
    return None


def render_result(record: Record) -> RenderedBlock:
    """Show a turn result only when it reports an error.

    `is_error` must be the boolean True; truthy strings do not count.
    """
    result = _as_text(record.get("result"))
    if record.get("is_error") is True and result:
        return ERROR_PREFIX + result + BLOCK_SEPARATOR
    return None


def render_assistant(record: Record) -> RenderedBlock:
    """Join the text blocks of an assistant message, in order.

    Non-text blocks (tool_use, thinking, ...) are skipped.
    """
    content = _as_dict(record.get("message")).get("content")
    if not isinstance(content, list):
        return None

    texts = [
        block["text"]
        for block in content
        if isinstance(block, dict)
        and block.get("type") == ContentBlockType.TEXT.value
        and isinstance(block.get("text"), str)
    ]
    if not texts:
        return None
    return "\n".join(texts) + BLOCK_SEPARATOR


def render_user(record: Record) -> RenderedBlock:
    """Echo a tool run's stdout and stderr.

    The tool result's own `is_error` flag does not change the output; failures
    show up through the stderr text.
    """
    tool_result = _as_dict(record.get("tool_use_result"))
    stdout = _as_text(tool_result.get("stdout"))
    stderr = _as_text(tool_result.get("stderr"))

    parts = []
    if stdout:
        parts.append(stdout)
    if stderr:
        parts.append(STDERR_LABEL + stderr)
    if not parts:
        return None
    return "\n".join(parts) + BLOCK_SEPARATOR


def render_generic(record: Record) -> RenderedBlock:
    """Fallback for unknown record types: the record itself as compact JSON."""
    return encode_record(record) + "\n"
