"""Command-line entry point: serve the MCP server over stdio."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .basics import SERVER_NAME, SERVER_VERSION
from .server import LOG_LEVELS, ServerConfig, create_server, parse_log_level


LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int, stream=None) -> logging.Logger:
    """
    Send package logs to stderr at the given level.

    stdout carries protocol messages, so nothing may be logged there.
    """
    logger = logging.getLogger("my_first_mcp")
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated calls do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Tutorial MCP server speaking JSON-RPC over stdio",
    )
    parser.add_argument("--root", help="Restrict analysis tools to this directory")
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS),
        type=str.upper,
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument("--timezone", help="Default timezone for get_current_time")
    parser.add_argument("--cache-ttl", type=float, help="Resource cache TTL in seconds")
    parser.add_argument("--version", action="version", version=f"%(prog)s {SERVER_VERSION}")
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    overrides = {
        "root": args.root,
        "default_timezone": args.timezone,
        "cache_ttl": args.cache_ttl,
    }
    if args.log_level:
        overrides["log_level"] = parse_log_level(args.log_level)
    return ServerConfig.from_env(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    logger = configure_logging(config.log_level)

    server = create_server(config)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception:
        logger.exception("Server failed to start")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
