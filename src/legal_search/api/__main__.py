"""
Run the legal search HTTP API.

Usage:
    python -m legal_search.api --host 0.0.0.0 --port 8765
    legal-search-api --port 9000
"""

from __future__ import annotations

import argparse
import logging

from legal_search.config import Settings

from .server import run_api_server


def main(argv: list[str] | None = None) -> None:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Legal Search HTTP API Server")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_api_server(host=args.host, port=args.port, settings=settings)


if __name__ == "__main__":
    main()
