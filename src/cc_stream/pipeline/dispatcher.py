"""Message dispatcher: routes a decoded record to its renderer by `type`.

// [LAW:dataflow-not-control-flow] Dispatch via table lookup, not if/elif chains.
// [LAW:one-source-of-truth] The table is keyed by every RecordKind member.
"""

from collections.abc import Callable

from cc_stream.core import renderers
from cc_stream.pipeline.event_types import Record, RecordKind, RenderedBlock

Renderer = Callable[[Record], RenderedBlock]

_RENDERERS: dict[RecordKind, Renderer] = {
    RecordKind.SYSTEM: renderers.render_system,
    RecordKind.RESULT: renderers.render_result,
    RecordKind.ASSISTANT: renderers.render_assistant,
    RecordKind.USER: renderers.render_user,
}

# Exact string match on the discriminant.
_RENDERERS_BY_TYPE: dict[str, Renderer] = {
    kind.value: renderer for kind, renderer in _RENDERERS.items()
}


def renderer_for(record_type: object) -> Renderer:
    """Renderer for a discriminant value; generic fallback when unknown."""
    if isinstance(record_type, str):
        return _RENDERERS_BY_TYPE.get(record_type, renderers.render_generic)
    return renderers.render_generic


def dispatch(record: Record) -> RenderedBlock:
    """Render one record with the renderer its `type` selects."""
    return renderer_for(record.get("type"))(record)
