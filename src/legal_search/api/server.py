"""
HTTP API Server for multi-source legal search.

Endpoints:
    POST /api/legal-sources/search   Aggregate search across selected sources
    GET  /api/legal-sources/status   Connection status of every source
    GET  /api/legal-sources          Source catalog (descriptors)
    GET  /health                     Liveness check

Degraded sources never turn a search into an error: the response is 200
with the failure recorded in `perSource`. Only malformed requests (400)
and merge failures (500) produce error bodies, shaped `{error, details}`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from legal_search import __version__
from legal_search.config import DEFAULT_HOST, DEFAULT_PORT, Settings
from legal_search.container import ApplicationContainer, create_container
from legal_search.domain.entities import DateRange, SearchOptions
from legal_search.infrastructure.sources import close_adapters
from legal_search.shared.exceptions import (
    InternalAggregationError,
    InvalidRequestError,
    LegalSearchError,
)

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


# Pydantic models for API requests / responses
class DateRangeModel(BaseModel):
    start: str = ""
    end: str = ""


class SearchOptionsModel(BaseModel):
    limit: int | None = None
    jurisdiction: str | None = None
    court: str | None = None
    dateRange: DateRangeModel | None = None
    deduplicate: bool = False

    def to_options(self) -> SearchOptions:
        return SearchOptions(
            limit=self.limit,
            jurisdiction=self.jurisdiction or None,
            court=self.court or None,
            date_range=DateRange(self.dateRange.start, self.dateRange.end) if self.dateRange else None,
            deduplicate=self.deduplicate,
        )


class SearchRequest(BaseModel):
    """Body of POST /api/legal-sources/search."""
    query: str = ""
    sources: list[str] = Field(default_factory=list)
    options: SearchOptionsModel | None = None


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    sources: int


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    container: ApplicationContainer = app.state.container
    logger.info("Legal search API started")

    yield

    logger.info("Legal search API shutting down")
    await close_adapters(container.adapters())


def create_app(container: ApplicationContainer | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Pre-configured DI container (built from the environment
            when omitted). Tests pass a container with overridden providers.

    Returns:
        Configured FastAPI instance.
    """
    container = container or create_container()

    app = FastAPI(
        title="Legal Search API",
        description="Concurrent search across case law sources with per-source failure isolation.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ------------------------------------------------------------------
    # Error handlers
    # ------------------------------------------------------------------

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return _error(400, str(exc), exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return _error(400, "Invalid request body", problems or None)

    @app.exception_handler(InternalAggregationError)
    async def aggregation_error_handler(request: Request, exc: InternalAggregationError) -> JSONResponse:
        return _error(500, "Search failed", exc.details or str(exc))

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    @app.post("/api/legal-sources/search")
    async def search_sources(body: SearchRequest) -> dict[str, Any]:
        """Search the selected sources and return the merged, ranked page."""
        aggregator = container.aggregator()
        options = body.options.to_options() if body.options else SearchOptions()
        try:
            result = await aggregator.search_all(body.query, body.sources, options)
        except LegalSearchError:
            raise
        except Exception as e:
            logger.exception("Error in multi-source search")
            raise InternalAggregationError("Search failed", cause=e) from e
        return result.to_dict()

    @app.get("/api/legal-sources/status")
    async def source_status(refresh: bool = Query(False)) -> JSONResponse:
        """Probe every source; results are cached briefly unless refresh=true."""
        report = await container.status_checker().check_all(force_refresh=refresh)
        return JSONResponse(content=report.to_dict(), headers=NO_CACHE_HEADERS)

    @app.get("/api/legal-sources")
    async def list_sources() -> dict[str, Any]:
        """Static catalog of every registered source."""
        descriptors = container.aggregator().descriptors()
        return {"sources": [d.to_dict() for d in descriptors]}

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            service="legal-search",
            version=__version__,
            sources=len(container.aggregator().source_ids),
        )

    return app


def run_api_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    settings: Settings | None = None,
) -> None:
    """
    Run the HTTP API server.

    Args:
        host: Host to bind to (default: 127.0.0.1 for local only)
        port: Port to bind to (default: 8765)
        settings: Settings to use (environment when omitted)
    """
    import uvicorn

    app = create_app(create_container(settings))
    logger.info(f"Starting legal search API on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")
