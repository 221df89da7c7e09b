#!/usr/bin/env python3
"""
Main entry point for the Pantry inventory API server.
"""

import argparse

import uvicorn

from pantry.api import create_app
from pantry.config import get_config_manager
from pantry.utils import get_logger


def main() -> None:
    """Parse arguments and run the API server."""
    config = get_config_manager()

    parser = argparse.ArgumentParser(description="Run the Pantry inventory API server")
    parser.add_argument(
        '--host',
        default=config.get("api.host", "127.0.0.1"),
        help='Interface to bind (default: api.host setting)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=config.get("api.port", 8000),
        help='Port to listen on (default: api.port setting)'
    )
    parser.add_argument(
        '--db',
        help='Database path (overrides database.path for this run)'
    )
    args = parser.parse_args()

    if args.db:
        config.set("database.path", args.db, save=False)

    logger = get_logger("main")
    logger.info(f"Starting Pantry API on http://{args.host}:{args.port}")
    logger.info(f"API documentation available at: http://{args.host}:{args.port}/docs")

    uvicorn.run(create_app(config), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
