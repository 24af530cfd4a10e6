"""
SearchAggregator - Multi-source legal search with partial-failure tolerance.

Pipeline for one request:
1. Validate (non-empty query, at least one source, sane limit)
2. Resolve source ids to adapters (unknown / inactive ids are skipped)
3. Call every adapter concurrently; each call runs under its own deadline
   and its failure is captured, never propagated (settle-all)
4. Normalize each source's raw records inside that same boundary, so a
   malformed record fails its own source only
5. Merge in source order, optionally deduplicate
6. Rank (title matches first, stable) and truncate to the limit

A source that fails contributes zero results and a failed SourceOutcome;
the request as a whole still succeeds. Only InvalidRequestError (bad
input) and InternalAggregationError (merge-phase bug) ever escape.

Example:
    >>> aggregator = SearchAggregator(create_adapters())
    >>> page = await aggregator.search_all(
    ...     "Brown v. Board",
    ...     ["court_listener", "supreme_court_database"],
    ...     SearchOptions(limit=20),
    ... )
    >>> page.total, [o.status for o in page.per_source]
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from legal_search.domain.entities import (
    AggregatedSearch,
    OutcomeStatus,
    SearchOptions,
    SearchQuery,
    SearchResult,
    SourceDescriptor,
    SourceOutcome,
)
from legal_search.infrastructure.sources import LegalSourceAdapter
from legal_search.shared.async_utils import Settled, settle_all
from legal_search.shared.exceptions import (
    AdapterNetworkError,
    AdapterTimeoutError,
    InternalAggregationError,
    InvalidRequestError,
    failure_kind_of,
)

from .ranking import deduplicate, rank_by_title_match

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DEADLINE = 45.0


class SearchAggregator:
    """
    Fan a query out to legal source adapters and merge their results.

    Args:
        adapters: Source id -> adapter
        deadline: Seconds one adapter may take before it is counted as
            timed out for this request
    """

    def __init__(
        self,
        adapters: Mapping[str, LegalSourceAdapter],
        *,
        deadline: float = DEFAULT_SEARCH_DEADLINE,
    ) -> None:
        self._adapters = dict(adapters)
        self._deadline = deadline

    @property
    def source_ids(self) -> list[str]:
        return list(self._adapters)

    def descriptors(self) -> list[SourceDescriptor]:
        return [adapter.descriptor for adapter in self._adapters.values()]

    async def search(self, request: SearchQuery) -> AggregatedSearch:
        return await self.search_all(request.text, request.source_ids, request.options)

    async def search_all(
        self,
        query: str,
        source_ids: Sequence[str],
        options: SearchOptions | None = None,
    ) -> AggregatedSearch:
        """
        Search the selected sources concurrently and merge the results.

        Args:
            query: Free-text query
            source_ids: Sources to search, in priority order
            options: Limit and filters (defaults: limit 50, no filters)

        Returns:
            AggregatedSearch with results truncated to the limit, `total`
            counting all merged results before truncation, and one
            SourceOutcome per resolved source

        Raises:
            InvalidRequestError: empty query, no sources, or bad limit
            InternalAggregationError: merging collected results failed
        """
        options = options or SearchOptions()
        self._validate(query, source_ids, options)

        adapters = self._resolve(source_ids)
        settled = await settle_all(
            *(self._invoke(adapter, query, options) for adapter in adapters)
        )

        per_source: list[SourceOutcome] = []
        batches: list[list[SearchResult]] = []
        for adapter, outcome in zip(adapters, settled):
            per_source.append(self._record(adapter, outcome))
            if outcome.ok:
                batches.append(outcome.value or [])

        try:
            results, total = self._merge(batches, query, options)
        except Exception as e:
            logger.exception(f"Failed to merge results for {query!r}")
            raise InternalAggregationError("Search failed", cause=e) from e

        fulfilled = sum(1 for o in per_source if o.status is OutcomeStatus.FULFILLED)
        logger.info(
            f"Search {query!r}: {total} results from {fulfilled}/{len(per_source)} sources, "
            f"returning {len(results)}"
        )
        return AggregatedSearch(
            results=results,
            total=total,
            per_source=per_source,
            query=query,
            sources=list(source_ids),
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(query: str, source_ids: Sequence[str], options: SearchOptions) -> None:
        if not query or not query.strip():
            raise InvalidRequestError("Query and sources are required", details="Query cannot be empty")
        if not source_ids:
            raise InvalidRequestError("Query and sources are required", details="Select at least one source")
        limit = options.limit
        # 0 falls back to the default limit
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 0):
            raise InvalidRequestError(
                "Invalid limit",
                details=f"limit must be a positive integer (0 for the default), got {limit!r}",
            )

    def _resolve(self, source_ids: Sequence[str]) -> list[LegalSourceAdapter]:
        """Adapters for the requested ids, in request order, without repeats."""
        resolved: list[LegalSourceAdapter] = []
        seen: set[str] = set()
        for source_id in source_ids:
            if source_id in seen:
                continue
            seen.add(source_id)
            adapter = self._adapters.get(source_id)
            if adapter is None:
                logger.debug(f"Skipping unknown source: {source_id}")
                continue
            if not adapter.descriptor.is_active:
                logger.debug(f"Skipping inactive source: {source_id}")
                continue
            resolved.append(adapter)
        return resolved

    async def _invoke(
        self,
        adapter: LegalSourceAdapter,
        query: str,
        options: SearchOptions,
    ) -> list[SearchResult]:
        try:
            raws = await asyncio.wait_for(adapter.search(query, options), timeout=self._deadline)
        except TimeoutError:
            raise AdapterTimeoutError(
                f"{adapter.name} did not respond within {self._deadline:g}s",
                source_id=adapter.source_id,
            ) from None
        try:
            return [adapter.normalize(raw) for raw in raws]
        except Exception as e:
            raise AdapterNetworkError(
                f"{adapter.name} returned a malformed record: {e!r}",
                source_id=adapter.source_id,
            ) from e

    @staticmethod
    def _record(adapter: LegalSourceAdapter, outcome: Settled[list[SearchResult]]) -> SourceOutcome:
        if outcome.ok:
            return SourceOutcome.fulfilled(adapter.source_id, len(outcome.value or []))

        error = outcome.error
        message = str(error) or type(error).__name__
        logger.warning(f"{adapter.source_id} search failed: {message}")
        return SourceOutcome.failed(adapter.source_id, message, failure_kind_of(error))

    @staticmethod
    def _merge(
        batches: list[list[SearchResult]],
        query: str,
        options: SearchOptions,
    ) -> tuple[list[SearchResult], int]:
        merged = [result for batch in batches for result in batch]
        if options.deduplicate:
            merged, stats = deduplicate(merged)
            if stats.duplicates_removed:
                logger.debug(f"Removed {stats.duplicates_removed} duplicate results")

        ranked = rank_by_title_match(merged, query)
        return ranked[: options.result_limit], len(ranked)
