#!/usr/bin/env python3
"""
Graph Store Service - HTTP Server Entry Point

Serves an in-memory property graph of nodes and relationships over a JSON API.
All state lives in process memory and is discarded on exit.
"""

import argparse
import sys

import uvicorn

from graphstore.config import settings
from graphstore.utils.logger import app_logger, setup_logging


def main():
    """Main entry point for the API server."""
    parser = argparse.ArgumentParser(description="Graph Store Service - HTTP API")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", default=settings.reload, help="Reload on code changes")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level")

    args = parser.parse_args()

    if args.log_level.upper() != settings.log_level.upper():
        setup_logging(args.log_level, settings.log_file)

    logger = app_logger.bind(component="main")
    logger.info("Starting Graph Store API server")
    logger.info(f"Listening on {args.host}:{args.port}")
    logger.info(f"Allowed CORS origins: {settings.cors_origins}")

    try:
        uvicorn.run(
            "api_server:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=args.log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
