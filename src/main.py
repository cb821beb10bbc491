"""
Main entry point for the MCP user management server.

Starts the server on the stdio transport (default) or HTTP, and installs
process-level handlers:
- SIGINT / SIGTERM: log and exit 0
- uncaught exceptions and unhandled asyncio errors: log and exit 1
"""

# Standard library imports
import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Any, Dict, List, Optional

# Third-party imports
import uvicorn
from dotenv import load_dotenv

# Local imports
from common.config import Config, load_config
from common.logging import get_logger, setup_logging
from user_mcp.mcp_server import UserManagementServer
from user_mcp.transports import StdioTransport, create_http_app

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="MCP User Management Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport to serve on (default: stdio)",
    )
    parser.add_argument("--port", type=int, help="Override the HTTP port")
    parser.add_argument("--host", type=str, help="Override the HTTP host")
    return parser.parse_args(argv)


def _exit(code: int) -> None:
    """Flush logs and leave immediately; the stdin reader thread may still be blocked."""
    logging.shutdown()
    os._exit(code)


def _handle_signal(signum: int, _frame: Any) -> None:
    logger.info(
        event="shutdown_signal_received",
        signal=signal.Signals(signum).name,
        message="Shutting down gracefully",
    )
    _exit(0)


def _handle_uncaught_exception(exc_type, exc_value, exc_tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    logger.critical(
        event="uncaught_exception",
        error=str(exc_value),
        error_type=exc_type.__name__,
        exc_info=(exc_type, exc_value, exc_tb),
    )
    _exit(1)


def _handle_loop_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    exception = context.get("exception")
    logger.critical(
        event="unhandled_async_error",
        message=context.get("message"),
        error=str(exception) if exception else None,
        error_type=type(exception).__name__ if exception else None,
    )
    _exit(1)


def install_process_handlers() -> None:
    """Install signal and last-resort error handlers."""
    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)
    sys.excepthook = _handle_uncaught_exception


async def serve_stdio(server: UserManagementServer) -> None:
    """Run the stdio transport until EOF."""
    asyncio.get_running_loop().set_exception_handler(_handle_loop_exception)
    transport = StdioTransport(server)
    logger.info(event="server_connected", message="MCP Server connected to stdio transport")
    await transport.run()


def serve_http(server: UserManagementServer, config: Config, args: argparse.Namespace) -> None:
    """Run the HTTP transport with uvicorn."""
    app = create_http_app(server)
    host = args.host or config.host
    port = args.port or config.port

    logger.info(event="starting_http_server", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_config=None, access_log=False)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()

    try:
        args = parse_args(argv)
        config = load_config()
        setup_logging(config)
        install_process_handlers()

        logger.info(
            event="application_starting",
            name=config.server_name,
            version=config.server_version,
            environment=config.environment,
            transport=args.transport,
        )

        server = UserManagementServer(config)

        if args.transport == "http":
            serve_http(server, config, args)
        else:
            asyncio.run(serve_stdio(server))

    except KeyboardInterrupt:
        logger.info(event="application_shutdown", reason="Keyboard interrupt")
    except SystemExit as e:
        if e.code not in (0, None):
            logger.critical(event="application_failed", exit_code=e.code)
        raise
    except Exception as e:
        logger.critical(
            event="application_crashed",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
