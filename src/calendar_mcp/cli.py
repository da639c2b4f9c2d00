from __future__ import annotations

import argparse
import logging
import signal
import sys

from .config import get_settings
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calendar MCP command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    mcp_parser = subparsers.add_parser("mcp", help="Start the MCP server.")
    mcp_parser.add_argument("--transport", choices=("stdio", "http"), default="stdio")
    mcp_parser.add_argument("--host", default="127.0.0.1")
    mcp_parser.add_argument("--port", type=int, default=8765)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server exposing the same tools.")
    api_parser.add_argument("--host", default="127.0.0.1")
    api_parser.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("cleanup", help="Evict stale memory sessions and exit.")

    return parser


def _exit_on_sigterm(signum: int, frame: object) -> None:
    sys.exit(0)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.logging)
    logger = logging.getLogger(__name__)
    parser = build_parser()
    args = parser.parse_args()
    logger.info("Calendar MCP CLI starting: %s", args.command)

    # SIGTERM unwinds like Ctrl+C so servers run their shutdown cleanup.
    signal.signal(signal.SIGTERM, _exit_on_sigterm)

    if args.command == "mcp":
        from .services.mcp import run_mcp_server

        run_mcp_server(transport=args.transport, host=args.host, port=args.port)
    elif args.command == "api":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
    elif args.command == "cleanup":
        from .services import get_gateway

        removed = get_gateway().cleanup_sessions()
        logger.info("Removed %d stale session(s)", removed)
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
