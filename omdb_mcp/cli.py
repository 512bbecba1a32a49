"""
OMDb MCP Server entry point.

Usage:
    omdb-mcp-server                    # HTTP on 127.0.0.1:8080
    omdb-mcp-server --port 9000        # Custom port
    omdb-mcp-server --stdio            # Newline-delimited JSON-RPC on stdin/stdout
    omdb-mcp-server --config omdb.yaml # Load settings from YAML

The stdio transport is only used when requested with --stdio or
MCP_STDIO_ENABLED=true. In that mode stdout carries the protocol, so logs go
to stderr or to OMDB_MCP_LOG_FILE.
"""

import sys
import argparse
import logging
from typing import List, Optional

from omdb_mcp.core.bootstrap import build_runtime
from omdb_mcp.core.config import OmdbMcpConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("OmdbMcp.cli")


def configure_logging(level: str, stdio: bool, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = []
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))
    if not stdio or not log_file:
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_parser(config: OmdbMcpConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="OMDb MCP Server")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--stdio", action="store_true", help="Serve MCP over stdin/stdout instead of HTTP")
    parser.add_argument("--host", default=None, help=f"Host to bind to (default {config.server.host})")
    parser.add_argument("--port", type=int, default=None, help=f"Port to bind to (default {config.server.port})")
    parser.add_argument("--log-level", default=None, help=f"Log level (default {config.server.log_level})")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    config = OmdbMcpConfig.from_env()
    args = build_parser(config).parse_args(argv)
    if args.config:
        config = OmdbMcpConfig.from_yaml(args.config)

    stdio = args.stdio or config.transport.stdio_enabled
    log_level = args.log_level or config.server.log_level
    configure_logging(log_level, stdio=stdio, log_file=config.transport.log_file)

    runtime = build_runtime(config)
    try:
        if stdio:
            from omdb_mcp.mcp.server import StdioServer

            StdioServer(
                runtime.engine,
                max_workers=config.transport.dispatch_max_workers,
                queue_limit=config.transport.dispatch_queue_limit,
            ).serve()
            return 0

        import uvicorn
        from omdb_mcp.api import create_app

        host = args.host or config.server.host
        port = args.port or config.server.port
        logger.info("Starting OMDb MCP Server on %s:%d", host, port)
        uvicorn.run(
            create_app(runtime.engine, runtime.cache),
            host=host,
            port=port,
            log_level=log_level.lower(),
        )
        return 0
    finally:
        runtime.close()


if __name__ == "__main__":
    sys.exit(main())
