"""
Supreme Court Database (SCDB) Client - Washington University in St. Louis.

Docs: http://scdb.wustl.edu/documentation.php

Open access, no key. Every record is a U.S. Supreme Court decision, so the
court is constant and the snippet is built from the coded issue fields.
"""

from __future__ import annotations

from typing import Any

from legal_search.domain.entities import (
    AccessType,
    SearchOptions,
    SourceCoverage,
    SourceDescriptor,
)

from .adapter import LegalSourceAdapter

SCDB_API = "http://scdb.wustl.edu/api"
SCDB_CASE_URL = "http://scdb.wustl.edu/analysisCaseDetail.php?cid={case_id}"
SUPREME_COURT = "Supreme Court of the United States"


class SupremeCourtDatabaseAdapter(LegalSourceAdapter):
    descriptor = SourceDescriptor(
        id="supreme_court_database",
        name="Supreme Court Database",
        access_type=AccessType.FREE,
        base_url=SCDB_API,
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal"),
            date_range="1791-present",
            document_types=("Supreme Court Decisions",),
        ),
        description="Coded data on every U.S. Supreme Court decision",
    )
    _connected_message = "Connected to Supreme Court Database API"

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"term": query, "limit": options.per_source_limit}
        if options.date_range:
            params["dateDecision_start"] = options.date_range.start
            params["dateDecision_end"] = options.date_range.end

        data = await self._make_request("/cases", params=params)
        if isinstance(data, list):
            return data
        return data.get("results", []) if isinstance(data, dict) else []

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        case_id = raw.get("caseId") or ""
        issue = f"{raw.get('issue') or ''} {raw.get('issueArea') or ''}"
        return {
            "id": case_id,
            "title": raw.get("caseName"),
            "citation": raw.get("usCite") or raw.get("sctCite"),
            "court": SUPREME_COURT,
            "date": raw.get("dateDecision"),
            "snippet": issue.strip(),
            "url": SCDB_CASE_URL.format(case_id=case_id) if case_id else "",
        }

    async def _probe(self) -> None:
        await self._make_request("/justices")
