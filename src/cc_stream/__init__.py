"""cc-stream: terminal front-end for the Claude CLI stream-json protocol."""

__version__ = "0.1.0"
