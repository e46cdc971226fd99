"""CLI entry point for cc-stream."""

import argparse
import logging
import sys

from rich.console import Console

import cc_stream.io.logging_setup
import cc_stream.io.settings
from cc_stream.io.transcript import DEFAULT_REPLAY_CHUNK_SIZE, iter_transcript_chunks
from cc_stream.pipeline.event_types import DecodeFailure
from cc_stream.pipeline.record_pipeline import RecordPipeline
from cc_stream.tui.app import CcStreamApp, process_stream_factory

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-stream",
        description="Terminal front-end for the Claude CLI stream-json protocol",
    )
    parser.add_argument(
        "--cwd",
        type=str,
        default=None,
        help="Working directory for the claude process (default: current directory)",
    )
    parser.add_argument(
        "--claude-command",
        type=str,
        default=None,
        help=(
            "Executable used to start claude (default: settings 'claude_command', "
            f"then ${cc_stream.io.settings.CLAUDE_COMMAND_ENV}, then 'claude')"
        ),
    )
    parser.add_argument(
        "--extra-args",
        type=str,
        default=None,
        help="Extra arguments appended after the stream-json flags (shell-quoted)",
    )
    parser.add_argument(
        "--session",
        type=str,
        default="unnamed-session",
        help="Session name, used for log file naming (default: unnamed-session)",
    )
    parser.add_argument(
        "--record",
        type=str,
        default=None,
        help="Record the raw claude output to this .jsonl path",
    )
    parser.add_argument(
        "--replay",
        type=str,
        default=None,
        help="Load a recorded .jsonl transcript into the UI instead of starting claude",
    )
    parser.add_argument(
        "--render",
        type=str,
        default=None,
        help="Print the rendered transcript of a .jsonl file to stdout and exit",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help=f"Read size for --render/--replay (default: settings 'replay_chunk_size' or {DEFAULT_REPLAY_CHUNK_SIZE})",
    )
    return parser


def render_transcript(
    path: str,
    out: Console,
    err: Console,
    chunk_size: int = DEFAULT_REPLAY_CHUNK_SIZE,
) -> int:
    """Render a recorded transcript to `out`. Returns the number of undecodable lines."""

    def report(failure: DecodeFailure) -> None:
        err.print(f"undecodable line: {failure.summary()}", style="bold red")

    pipeline = RecordPipeline(on_decode_failure=report)
    for chunk in iter_transcript_chunks(path, chunk_size):
        for item in pipeline.feed(chunk):
            if item.text is not None:
                out.print(item.text, end="")
    if pipeline.pending.strip():
        err.print("transcript ends with an unterminated line; ignored", style="yellow")
    return len(pipeline.failures)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    chunk_size = args.chunk_size
    if chunk_size is None:
        configured = cc_stream.io.settings.load_setting(
            "replay_chunk_size", DEFAULT_REPLAY_CHUNK_SIZE
        )
        # bool is an int subclass; true/false is not a size.
        if not isinstance(configured, int) or isinstance(configured, bool):
            print(
                f"settings replay_chunk_size must be an integer, got {configured!r}",
                file=sys.stderr,
            )
            return 2
        chunk_size = configured
    if chunk_size <= 0:
        print(f"--chunk-size must be positive, got {chunk_size}", file=sys.stderr)
        return 2

    if args.render:
        cc_stream.io.logging_setup.configure(session_name=args.session, console=False)
        out = Console(markup=False, highlight=False, emoji=False, soft_wrap=True)
        err = Console(stderr=True, markup=False, highlight=False, emoji=False)
        try:
            failures = render_transcript(args.render, out, err, chunk_size)
        except OSError as e:
            err.print(f"cannot read {args.render}: {e}", style="bold red")
            return 2
        return 1 if failures else 0

    # The UI owns the terminal; logs go to the file only.
    log_runtime = cc_stream.io.logging_setup.configure(session_name=args.session, console=False)
    logger.info(
        "logging configured level=%s file=%s",
        log_runtime.level_name,
        log_runtime.file_path,
    )

    stream_factory = None
    if not args.replay:
        config = cc_stream.io.settings.resolve_launch_config(
            command=args.claude_command,
            extra_args=args.extra_args,
            cwd=args.cwd,
        )
        logger.info("launch config command=%s cwd=%s", config.command, config.cwd)
        stream_factory = process_stream_factory(config)

    app = CcStreamApp(
        stream_factory,
        session_name=args.session,
        replay_path=args.replay,
        record_path=args.record,
        replay_chunk_size=chunk_size,
    )
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
