"""
Application DI Container (dependency-injector).

Centralizes creation of the adapter registry, the search aggregator and
the status checker, all sharing one set of adapters (and therefore one
httpx client per provider).

Usage::

    from legal_search.config import Settings
    from legal_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().to_dict())

    aggregator = container.aggregator()
    checker = container.status_checker()

    # In tests, override any provider:
    container.adapters.override(providers.Object({"fake": fake_adapter}))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from legal_search.config import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_SEARCH_DEADLINE,
    DEFAULT_STATUS_TTL,
    Settings,
)

logger = logging.getLogger(__name__)


def _create_adapters(
    api_keys: dict[str, str] | None,
    http_timeout: float | None,
    disabled_sources: list[str] | None,
) -> object:
    """Lazy factory for the adapter registry."""
    from legal_search.infrastructure.sources import create_adapters

    return create_adapters(
        api_keys or {},
        timeout=http_timeout or DEFAULT_HTTP_TIMEOUT,
        disabled=disabled_sources or (),
    )


def _create_aggregator(adapters: object, search_deadline: float | None) -> object:
    """Lazy factory for SearchAggregator."""
    from legal_search.application.search import SearchAggregator

    return SearchAggregator(adapters, deadline=search_deadline or DEFAULT_SEARCH_DEADLINE)


def _create_status_checker(
    adapters: object,
    probe_timeout: float | None,
    status_ttl: float | None,
) -> object:
    """Lazy factory for StatusChecker."""
    from legal_search.application.status import StatusChecker

    return StatusChecker(
        adapters,
        probe_timeout=probe_timeout or DEFAULT_PROBE_TIMEOUT,
        cache_ttl=DEFAULT_STATUS_TTL if status_ttl is None else status_ttl,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the legal search service.

    Manages creation and lifecycle of all core services:
    - ``adapters``: source id -> LegalSourceAdapter
    - ``aggregator``: multi-source SearchAggregator
    - ``status_checker``: connection StatusChecker with TTL cache
    """

    config = providers.Configuration()

    adapters = providers.Singleton(
        _create_adapters,
        api_keys=config.api_keys,
        http_timeout=config.http_timeout,
        disabled_sources=config.disabled_sources,
    )

    aggregator = providers.Singleton(
        _create_aggregator,
        adapters=adapters,
        search_deadline=config.search_deadline,
    )

    status_checker = providers.Singleton(
        _create_status_checker,
        adapters=adapters,
        probe_timeout=config.probe_timeout,
        status_ttl=config.status_ttl,
    )


def create_container(settings: Settings | None = None) -> ApplicationContainer:
    """Container configured from `settings` (environment when omitted)."""
    settings = settings or Settings.from_env()
    container = ApplicationContainer()
    container.config.from_dict(settings.to_dict())
    logger.info(f"API keys: {settings.describe_keys()}")
    return container


__all__ = ["ApplicationContainer", "create_container"]
