"""HTTP API (FastAPI) for legal source search and status."""

from .server import create_app, run_api_server

__all__ = ["create_app", "run_api_server"]
