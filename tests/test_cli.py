"""Tests for cli.py: argument parsing, --render mode and app launch wiring."""

import io

import pytest
from rich.console import Console

import cc_stream.cli
from cc_stream.cli import build_parser, main, render_transcript
from cc_stream.io.settings import save_settings
from tests.harness import (
    TRANSCRIPT_RENDERED,
    make_assistant_record,
    make_line,
    make_result_record,
    make_transcript,
)


def _console():
    buf = io.StringIO()
    return Console(file=buf, markup=False, highlight=False, emoji=False, soft_wrap=True), buf


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.session == "unnamed-session"
        assert args.render is None
        assert args.replay is None
        assert args.chunk_size is None

    def test_all_flags(self):
        args = build_parser().parse_args(
            [
                "--cwd", "/tmp",
                "--claude-command", "npx claude",
                "--extra-args", "--model haiku",
                "--session", "s1",
                "--record", "out.jsonl",
                "--chunk-size", "32",
            ]
        )
        assert args.cwd == "/tmp"
        assert args.claude_command == "npx claude"
        assert args.extra_args == "--model haiku"
        assert args.session == "s1"
        assert args.record == "out.jsonl"
        assert args.chunk_size == 32


class TestRenderTranscript:
    def test_renders_in_order(self, transcript_file):
        out, out_buf = _console()
        err, err_buf = _console()
        failures = render_transcript(str(transcript_file(make_transcript())), out, err, chunk_size=5)
        assert failures == 0
        assert out_buf.getvalue() == TRANSCRIPT_RENDERED
        assert err_buf.getvalue() == ""

    def test_reports_bad_lines_and_continues(self, transcript_file):
        text = "oops\n" + make_line(make_assistant_record("after"))
        out, out_buf = _console()
        err, err_buf = _console()
        assert render_transcript(str(transcript_file(text)), out, err) == 1
        assert out_buf.getvalue() == "after\n\n"
        assert "undecodable line" in err_buf.getvalue()

    def test_warns_on_unterminated_tail(self, transcript_file):
        text = make_line(make_assistant_record("done")) + '{"type": "assis'
        out, out_buf = _console()
        err, err_buf = _console()
        assert render_transcript(str(transcript_file(text)), out, err) == 0
        assert out_buf.getvalue() == "done\n\n"
        assert "unterminated" in err_buf.getvalue()


class TestMainRender:
    def test_clean_transcript_exits_zero(self, transcript_file, settings_file, capsys):
        code = main(["--render", str(transcript_file(make_transcript()))])
        assert code == 0
        assert capsys.readouterr().out == TRANSCRIPT_RENDERED

    def test_bad_line_exits_one(self, transcript_file, settings_file, capsys):
        code = main(["--render", str(transcript_file("nope\n"))])
        assert code == 1
        assert "undecodable" in capsys.readouterr().err

    def test_missing_file_exits_two(self, tmp_path, settings_file, capsys):
        code = main(["--render", str(tmp_path / "missing.jsonl")])
        assert code == 2
        assert "cannot read" in capsys.readouterr().err

    def test_negative_chunk_size_rejected(self, transcript_file, settings_file, capsys):
        code = main(["--render", str(transcript_file("{}\n")), "--chunk-size", "-4"])
        assert code == 2
        assert "--chunk-size" in capsys.readouterr().err

    def test_zero_chunk_size_flag_rejected(self, transcript_file, settings_file, capsys):
        code = main(["--render", str(transcript_file(make_transcript())), "--chunk-size", "0"])
        assert code == 2
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "--chunk-size" in captured.err

    @pytest.mark.parametrize("configured", ["big", 2.5, None, True, [4096]])
    def test_non_integer_chunk_size_setting_rejected(
        self, transcript_file, settings_file, capsys, configured
    ):
        save_settings({"replay_chunk_size": configured})
        assert main(["--render", str(transcript_file(make_transcript()))]) == 2
        assert "replay_chunk_size" in capsys.readouterr().err

    def test_flag_overrides_bad_setting(self, transcript_file, settings_file, capsys):
        save_settings({"replay_chunk_size": "big"})
        assert main(["--render", str(transcript_file(make_transcript())), "--chunk-size", "5"]) == 0

    def test_lone_surrogate_renders_and_continues(self, transcript_file, settings_file, capsys):
        text = (
            '{"type": "assistant", "message": {"content": [{"type": "text", "text": "a\\ud800b"}]}}\n'
            + make_line(make_result_record("boom", is_error=True))
        )
        assert main(["--render", str(transcript_file(text))]) == 0
        assert capsys.readouterr().out == "a\ufffdb\n\nERROR: boom\n\n"

    def test_chunk_size_from_settings(self, transcript_file, settings_file, capsys):
        save_settings({"replay_chunk_size": 3})
        assert main(["--render", str(transcript_file(make_transcript()))]) == 0
        assert capsys.readouterr().out == TRANSCRIPT_RENDERED

    def test_zero_chunk_size_in_settings_rejected(self, transcript_file, settings_file):
        save_settings({"replay_chunk_size": 0})
        assert main(["--render", str(transcript_file(make_transcript()))]) == 2


class _FakeApp:
    instances: list["_FakeApp"] = []

    def __init__(self, stream_factory, **kwargs):
        self.stream_factory = stream_factory
        self.kwargs = kwargs
        self.ran = False
        _FakeApp.instances.append(self)

    def run(self):
        self.ran = True


@pytest.fixture
def fake_app(monkeypatch):
    _FakeApp.instances = []
    monkeypatch.setattr(cc_stream.cli, "CcStreamApp", _FakeApp)
    return _FakeApp


class TestMainLaunch:
    def test_live_mode_builds_stream_factory(self, fake_app, settings_file, tmp_path):
        code = main(
            [
                "--claude-command", "clod",
                "--cwd", str(tmp_path),
                "--session", "s1",
                "--record", str(tmp_path / "rec.jsonl"),
            ]
        )
        assert code == 0
        [app] = fake_app.instances
        assert app.ran
        assert callable(app.stream_factory)
        assert app.kwargs["session_name"] == "s1"
        assert app.kwargs["record_path"] == str(tmp_path / "rec.jsonl")
        assert app.kwargs["replay_path"] is None

    def test_replay_mode_has_no_stream_factory(self, fake_app, settings_file, transcript_file):
        path = str(transcript_file(make_transcript()))
        assert main(["--replay", path, "--chunk-size", "8"]) == 0
        [app] = fake_app.instances
        assert app.stream_factory is None
        assert app.kwargs["replay_path"] == path
        assert app.kwargs["replay_chunk_size"] == 8
