"""Bundle size lookups (bundlephobia)."""

from __future__ import annotations

import logging
import urllib.parse
from typing import Optional

from constants import Constants
from common.http_client import HttpClient
from mcp_schemas import SIZE_REPORT
from mcp_validate import validate_response

from .client import NpmRegistryClient
from .models import PackageIdentifier, SizeReport

logger = logging.getLogger(__name__)


class BundleSizeClient:
    """The size service needs an explicit version, so it is resolved through the registry first."""

    def __init__(
        self,
        http: HttpClient,
        registry: NpmRegistryClient,
        base_url: Optional[str] = None,
    ):
        self._http = http
        self._registry = registry
        self._base_url = base_url or Constants.BUNDLE_SIZE_URL

    async def get_size(self, name: str, version: Optional[str] = None) -> SizeReport:
        resolved = PackageIdentifier(name, await self._registry.resolve_version(name, version))
        logger.debug("Resolved %s@%s to %s", name, version or "latest", resolved.version)
        spec = urllib.parse.quote(str(resolved), safe="")
        data = await self._http.get_json(f"{self._base_url}?package={spec}", context="bundle size")
        return SizeReport.from_json(validate_response(SIZE_REPORT, data, source="bundle size"))
