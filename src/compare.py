"""Side-by-side comparison of two packages.

Four requests run concurrently: the package document and the last-month
download count of each package. The join waits for all four to settle and
then fails with the first failure in input order; there is no partial result.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Sequence, Tuple

from constants import DownloadPeriods
from common.logging_utils import extra_context, Timer
from mcp_schemas import PACKAGE_DOCUMENT
from mcp_validate import validate_response
from registry.npm.client import NpmRegistryClient, latest_manifest
from registry.npm.downloads import DownloadsClient
from registry.npm.models import ComparisonEntry, DownloadPoint, person_name

logger = logging.getLogger(__name__)


async def gather_all(awaitables: Sequence[Awaitable[Any]]) -> List[Any]:
    """Run every awaitable to completion, then raise the first failure (input order).

    Unlike ``asyncio.gather`` without ``return_exceptions``, no sibling is left
    running when one fails.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


def _latest_entry(document: Dict[str, Any], downloads: DownloadPoint) -> ComparisonEntry:
    latest = document["dist-tags"]["latest"]
    manifest = latest_manifest(document)
    people = document.get("maintainers") or manifest.get("maintainers") or []
    maintainers = [n for n in (person_name(p) for p in people) if n]
    keywords = manifest.get("keywords") or document.get("keywords") or []
    return ComparisonEntry(
        name=document["name"],
        version=latest,
        description=manifest.get("description") or document.get("description"),
        downloads=downloads.downloads,
        maintainers=maintainers,
        keywords=[str(k) for k in keywords],
    )


class ComparisonOrchestrator:
    def __init__(self, registry: NpmRegistryClient, downloads: DownloadsClient):
        self._registry = registry
        self._downloads = downloads

    async def compare(self, first: str, second: str) -> Tuple[ComparisonEntry, ComparisonEntry]:
        """Compare ``first`` and ``second``; the result keeps the caller's order."""
        period = DownloadPeriods.LAST_MONTH.value
        with Timer() as t:
            doc_a, doc_b, dl_a, dl_b = await gather_all(
                [
                    self._registry.fetch_full_package_document(first),
                    self._registry.fetch_full_package_document(second),
                    self._downloads.get_downloads(first, period),
                    self._downloads.get_downloads(second, period),
                ]
            )
        logger.debug(
            "Comparison fetches settled",
            extra=extra_context(
                event="decision",
                component="compare",
                action="compare",
                duration_ms=t.duration_ms(),
            ),
        )
        doc_a = validate_response(PACKAGE_DOCUMENT, doc_a, source="package document")
        doc_b = validate_response(PACKAGE_DOCUMENT, doc_b, source="package document")
        return _latest_entry(doc_a, dl_a), _latest_entry(doc_b, dl_b)
