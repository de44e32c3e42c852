"""Wiring of the downstream clients shared by tools and resources."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from common.http_client import HttpClient
from compare import ComparisonOrchestrator
from registry.npm.client import NpmRegistryClient
from registry.npm.downloads import DownloadsClient
from registry.npm.quality import QualityClient
from registry.npm.size import BundleSizeClient
from repository.readme import ReadmeResolver


@dataclass
class NpmServices:
    """Holds one client per downstream service; none keeps per-request state."""
    http: HttpClient
    registry: NpmRegistryClient
    downloads: DownloadsClient
    size: BundleSizeClient
    quality: QualityClient
    readme: ReadmeResolver
    comparison: ComparisonOrchestrator

    @classmethod
    def create(cls, http: Optional[HttpClient] = None) -> "NpmServices":
        """Build the clients on top of ``http`` (a fresh HttpClient by default)."""
        http = http or HttpClient()
        registry = NpmRegistryClient(http)
        downloads = DownloadsClient(http)
        return cls(
            http=http,
            registry=registry,
            downloads=downloads,
            size=BundleSizeClient(http, registry),
            quality=QualityClient(http),
            readme=ReadmeResolver(http),
            comparison=ComparisonOrchestrator(registry, downloads),
        )

    async def aclose(self) -> None:
        await self.http.stop()
