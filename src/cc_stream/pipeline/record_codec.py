"""Record codec: JSON decoding of inbound lines, encoding of outbound messages.

// [LAW:single-enforcer] decode_record is the sole validation boundary for
//   inbound lines; everything downstream receives a dict.
// [LAW:dataflow-not-control-flow] Malformed input yields a DecodeFailure value.
"""

import json
import math
import re

from cc_stream.pipeline.event_types import DecodeFailure, Record

# json.loads joins escaped surrogate pairs, so a surrogate left in a decoded
# string is unpaired and cannot be encoded to UTF-8.
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _reject_constant(name: str) -> object:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def decode_record(line: str) -> Record | DecodeFailure:
    """Parse one protocol line into a record.

    Never raises for malformed input: a parse error, a NaN/Infinity literal,
    nesting too deep for the parser, or a top-level value that is not a JSON
    object, comes back as a DecodeFailure carrying the message.
    """
    try:
        value = json.loads(line, parse_constant=_reject_constant, parse_float=_finite_float)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError.
        return DecodeFailure(line=line, error=str(e))

    if not isinstance(value, dict):
        return DecodeFailure(
            line=line,
            error=f"expected a JSON object, got {type(value).__name__}",
        )
    return value


def encode_record(record: Record) -> str:
    """Compact JSON text for a record, key order preserved."""
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def build_user_message(text: str) -> Record:
    """Outbound user turn in stream-json input format."""
    return {
        "type": "user",
        "message": {
            "role": "user",
            "content": [{"type": "text", "text": text}],
        },
    }


def encode_user_message(text: str) -> bytes:
    """Wire bytes for one user turn: a single JSON line, newline-terminated."""
    return (encode_record(build_user_message(text)) + "\n").encode("utf-8")


def scrub_surrogates(text: str) -> str:
    """Replace unpaired surrogates (from `\\ud800`-style escapes) with U+FFFD."""
    return _LONE_SURROGATE.sub("\ufffd", text)
