"""``python -m chatrelay.cli``: chat with a running relay from the terminal."""

import argparse
import asyncio
import sys

from .config import CLIConfig
from .relay_cli import main

_DEFAULTS = CLIConfig()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments; defaults mirror ``CLIConfig``."""
    parser = argparse.ArgumentParser(
        prog="chatrelay-cli",
        description=(
            "Interactive chat against a chatrelay server. The conversation is "
            "kept in memory and resent on every turn."
        ),
    )
    parser.add_argument("--host", default=_DEFAULTS.host, help="server host")
    parser.add_argument("--port", type=int, default=_DEFAULTS.port, help="server port")
    parser.add_argument(
        "--mode",
        choices=("stream", "single"),
        default=_DEFAULTS.mode,
        help=f"stream: {_DEFAULTS.stream_path} (SSE); single: {_DEFAULTS.single_path}",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=_DEFAULTS.timeout,
        help="seconds to wait for the server before giving up on a turn",
    )
    parser.add_argument("--debug", action="store_true", help="log request details to stderr")
    return parser.parse_args(argv)


def cli_entry(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    config = CLIConfig(
        host=args.host, port=args.port, mode=args.mode, timeout=args.timeout
    )
    try:
        asyncio.run(main(config, debug=args.debug))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
