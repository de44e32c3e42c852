"""NPM registry client: version manifests, package documents and search."""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Tuple

from constants import Constants
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from common.errors import SchemaValidationError
from mcp_schemas import (
    DOCUMENT_VERSION_ENTRY,
    PACKAGE_DOCUMENT,
    REGISTRY_RECORD,
    SEARCH_RESULTS,
    VERSION_MANIFEST,
)
from mcp_validate import validate_response

from .models import DependencyTriple, PackageIdentifier, RegistryRecord, VersionSet

logger = logging.getLogger(__name__)


def encode_package_name(name: str) -> str:
    """Percent-encode a package name for use as a single URL path segment.

    Scoped names keep their ``@`` and ``/`` only as ``%40`` and ``%2F`` so the
    registry sees one segment, e.g. ``@types/node`` -> ``%40types%2Fnode``.
    """
    return urllib.parse.quote(name, safe="")


def latest_manifest(document: Dict[str, Any]) -> Dict[str, Any]:
    """Validated manifest of the version the ``latest`` dist-tag points to.

    Args:
        document: A package document already validated against PACKAGE_DOCUMENT.

    Raises:
        SchemaValidationError: The tag points to an unknown version, or the
            entry does not match the declared version shape.
    """
    latest = document["dist-tags"]["latest"]
    manifest = document["versions"].get(latest)
    if not isinstance(manifest, dict):
        raise SchemaValidationError(
            f"Invalid package document for {document['name']}: dist-tag 'latest' points to "
            f"unknown version {latest}",
            path="dist-tags/latest",
        )
    return validate_response(DOCUMENT_VERSION_ENTRY, manifest, source="version manifest")


class NpmRegistryClient:
    """Thin async client for the npm registry JSON API."""

    def __init__(
        self,
        http: HttpClient,
        registry_url: Optional[str] = None,
        search_url: Optional[str] = None,
    ):
        self._http = http
        self._registry_url = (registry_url or Constants.REGISTRY_URL_NPM).rstrip("/")
        self._search_url = search_url or f"{self._registry_url}{Constants.REGISTRY_SEARCH_PATH}"

    def package_url(self, name: str, version: Optional[str] = None) -> str:
        url = f"{self._registry_url}/{encode_package_name(name)}"
        if version is not None:
            url += f"/{urllib.parse.quote(version, safe='')}"
        return url

    async def fetch_package_at_version(self, name: str, version: Optional[str] = None) -> Any:
        """GET the manifest of ``version`` (default: the ``latest`` dist-tag)."""
        ident = PackageIdentifier(name, version)
        return await self._http.get_json(
            self.package_url(ident.name, ident.version_or_latest), context="registry"
        )

    async def fetch_full_package_document(self, name: str) -> Any:
        """GET the full document with every version, dist-tag and publish time."""
        return await self._http.get_json(self.package_url(name), context="registry")

    async def search_packages(
        self, query: str, limit: int = Constants.SEARCH_DEFAULT_LIMIT
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Search the registry.

        Returns:
            Tuple of (result objects in response order, total match count).
        """
        url = f"{self._search_url}?text={urllib.parse.quote(query, safe='')}&size={int(limit)}"
        data = validate_response(
            SEARCH_RESULTS,
            await self._http.get_json(url, context="search"),
            source="search",
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Search results",
                extra=extra_context(
                    event="decision",
                    component="registry",
                    action="search_packages",
                    count=len(data["objects"]),
                ),
            )
        return list(data["objects"]), int(data["total"])

    async def get_record(self, name: str, version: Optional[str] = None) -> RegistryRecord:
        """Manifest that must carry a ``repository`` descriptor (README lookups)."""
        data = await self.fetch_package_at_version(name, version)
        return RegistryRecord.from_json(validate_response(REGISTRY_RECORD, data, source="package"))

    async def get_manifest(self, name: str, version: Optional[str] = None) -> Dict[str, Any]:
        """Manifest validated for name and version only."""
        data = await self.fetch_package_at_version(name, version)
        return validate_response(VERSION_MANIFEST, data, source="package")

    async def get_dependencies(
        self, name: str, version: Optional[str] = None
    ) -> Tuple[Dict[str, Any], DependencyTriple]:
        manifest = await self.get_manifest(name, version)
        return manifest, DependencyTriple.from_json(manifest)

    async def get_document(self, name: str) -> Dict[str, Any]:
        data = await self.fetch_full_package_document(name)
        return validate_response(PACKAGE_DOCUMENT, data, source="package document")

    async def get_version_set(self, name: str) -> VersionSet:
        return VersionSet.from_json(await self.get_document(name))

    async def resolve_version(self, name: str, version: Optional[str] = None) -> str:
        """Resolve a tag, range or missing version to the concrete published version."""
        manifest = await self.get_manifest(name, version)
        return manifest["version"]
