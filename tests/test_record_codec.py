"""Tests for record_codec.py: inbound decoding and outbound encoding."""

import json

import pytest

from cc_stream.pipeline.event_types import DecodeFailure
from cc_stream.pipeline.record_codec import (
    build_user_message,
    decode_record,
    encode_record,
    encode_user_message,
    scrub_surrogates,
)


class TestDecodeRecord:
    def test_valid_object(self):
        assert decode_record('{"type": "system", "x": 1}') == {"type": "system", "x": 1}

    def test_malformed_json_is_a_failure_value(self):
        result = decode_record('{"type": ')
        assert isinstance(result, DecodeFailure)
        assert result.line == '{"type": '
        assert result.error

    def test_error_message_comes_from_parser(self):
        line = "not json"
        result = decode_record(line)
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads(line)
        assert result.error == str(exc_info.value)

    @pytest.mark.parametrize("line", ["[1, 2]", '"text"', "42", "null", "true"])
    def test_non_object_is_a_failure(self, line):
        result = decode_record(line)
        assert isinstance(result, DecodeFailure)
        assert "expected a JSON object" in result.error

    def test_record_without_type_still_decodes(self):
        assert decode_record('{"x": 1}') == {"x": 1}

    def test_failure_summary_truncates(self):
        failure = DecodeFailure(line="x" * 200, error="boom")
        summary = failure.summary(limit=10)
        assert summary.startswith("boom: ")
        assert len(summary) < 40


class TestEncode:
    def test_user_message_wire_format(self):
        data = encode_user_message("hello")
        assert data.endswith(b"\n")
        assert data.count(b"\n") == 1
        assert json.loads(data) == {
            "type": "user",
            "message": {"role": "user", "content": [{"type": "text", "text": "hello"}]},
        }

    def test_user_message_with_newlines_stays_one_line(self):
        data = encode_user_message("line one\nline two")
        assert data.count(b"\n") == 1
        assert json.loads(data)["message"]["content"][0]["text"] == "line one\nline two"

    def test_user_message_is_utf8(self):
        data = encode_user_message("café ✓")
        assert "café ✓".encode("utf-8") in data

    def test_build_user_message_decodes_back(self):
        record = build_user_message("hi")
        assert decode_record(encode_record(record)) == record

    def test_encode_record_is_compact(self):
        assert encode_record({"type": "bogus", "x": 1}) == '{"type":"bogus","x":1}'


class TestStrictDecoding:
    @pytest.mark.parametrize(
        "line",
        [
            '{"type": "x", "v": NaN}',
            '{"type": "x", "v": Infinity}',
            '{"type": "x", "v": -Infinity}',
            '{"type": "x", "v": 1e999}',
        ],
    )
    def test_non_finite_numbers_are_failures(self, line):
        result = decode_record(line)
        assert isinstance(result, DecodeFailure)
        assert result.line == line

    def test_finite_floats_still_decode(self):
        assert decode_record('{"type": "x", "v": 1.5e3}') == {"type": "x", "v": 1500.0}

    def test_deep_nesting_is_a_failure(self):
        line = "[" * 200000
        result = decode_record(line)
        assert isinstance(result, DecodeFailure)
        assert result.line == line

    def test_encode_refuses_non_finite(self):
        with pytest.raises(ValueError):
            encode_record({"type": "x", "v": float("nan")})


class TestScrubSurrogates:
    def test_lone_surrogate_replaced(self):
        record = decode_record('{"type": "x", "text": "a\\ud800b"}')
        assert scrub_surrogates(record["text"]) == "a\ufffdb"

    def test_paired_surrogates_kept(self):
        record = decode_record('{"type": "x", "text": "\\ud83d\\ude00"}')
        assert scrub_surrogates(record["text"]) == "\U0001F600"
