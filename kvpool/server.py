#!/usr/bin/env python3
"""
kvpool Server Entry Point

Usage:
    python -m kvpool.server                     # Default settings (127.0.0.1:10808)
    python -m kvpool.server --port 8080         # Custom port
    python -m kvpool.server -H 0.0.0.0          # Custom host
    python -m kvpool.server -m 256              # Memory limit in MB
    python -m kvpool.server -v 2                # Debug logging

Environment Variables:
    KVPOOL_HOST           - Server bind address
    KVPOOL_PORT           - Server port
    KVPOOL_MEMORY_LIMIT   - Memory limit in MB
    KVPOOL_VERBOSITY      - 0 (warnings), 1 (info), 2 (debug)
    KVPOOL_TICK_INTERVAL  - Seconds between memory governor ticks
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List

from . import __version__
from .config.settings import settings
from .network.tcp_server import KVServer


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="kvpool: In-Memory Cache Pool Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "-H", "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "-p", "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "-m", "--memorylimit",
        type=int,
        default=settings.MEMORY_LIMIT,
        help="Process memory limit in MB before the cache is pruned",
    )

    parser.add_argument(
        "-v", "--verbosity",
        type=int,
        default=settings.VERBOSITY,
        help="Log verbosity: 0 warnings, 1 info, 2 debug",
    )

    parser.add_argument(
        "--tick-interval",
        type=float,
        default=settings.TICK_INTERVAL,
        help="Seconds between memory governor runs",
    )

    return parser.parse_args(argv)


def verbosity_to_level(verbosity: int) -> int:
    """Map the verbosity option to a logging level."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int = 1) -> None:
    """Configure logging based on the verbosity option."""
    logging.basicConfig(
        level=verbosity_to_level(verbosity),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main(argv: List[str] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(verbosity=args.verbosity)
    logger = logging.getLogger(__name__)

    server = KVServer(
        host=args.host,
        port=args.port,
        memory_limit=args.memorylimit,
        tick_interval=args.tick_interval,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info(f"Started new kvpool (version {__version__}) instance on {args.host}:{args.port}")
    logger.info(f"  Memory limit: {args.memorylimit}MB")
    logger.info(f"  Verbosity: {args.verbosity}")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
