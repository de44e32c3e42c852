"""Resource registry: ``package://`` URIs addressed by path pattern.

Scoped package names must be percent-encoded inside URIs
(``package://%40types%2Fnode/readme``) so the name stays one path segment.
Reads never raise; a failure yields a plain-text error message.
"""
from __future__ import annotations

import json
import logging
import re
import urllib.parse
from dataclasses import dataclass
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping, Optional, Tuple

from mcp_tools import dependencies_data, package_info_data, readme_data, versions_data
from services import NpmServices

logger = logging.getLogger(__name__)

JSON_MIME = "application/json"
MARKDOWN_MIME = "text/markdown"
TEXT_MIME = "text/plain"


@dataclass(frozen=True)
class ResourceContent:
    uri: str
    mime_type: str
    text: str


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    uri_template: str
    description: str
    mime_type: str
    loader: Callable[[NpmServices, str], Awaitable[str]]

    @property
    def pattern(self) -> "re.Pattern[str]":
        regex = re.escape(self.uri_template).replace(re.escape("{packageName}"), "(?P<packageName>[^/]+)")
        return re.compile(f"^{regex}$")

    def uri_for(self, package_name: str) -> str:
        return self.uri_template.replace("{packageName}", urllib.parse.quote(package_name, safe=""))

    async def read(self, services: NpmServices, package_name: str) -> ResourceContent:
        """Load the resource for ``package_name`` (raw or percent-encoded)."""
        name = urllib.parse.unquote(package_name)
        uri = self.uri_for(name)
        try:
            text = await self.loader(services, name)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            message = str(exc) or exc.__class__.__name__
            logger.warning("Resource %s failed: %s", uri, message)
            return ResourceContent(uri=uri, mime_type=TEXT_MIME, text=f"Error reading {uri}: {message}")
        return ResourceContent(uri=uri, mime_type=self.mime_type, text=text)


def _json(payload) -> str:
    return json.dumps(payload, indent=2)


async def _metadata(services: NpmServices, name: str) -> str:
    return _json(await package_info_data(services, name, None))


async def _readme(services: NpmServices, name: str) -> str:
    return (await readme_data(services, name, None))["readme"]


async def _dependencies(services: NpmServices, name: str) -> str:
    return _json(await dependencies_data(services, name, None))


async def _versions(services: NpmServices, name: str) -> str:
    return _json(await versions_data(services, name))


RESOURCES: Mapping[str, ResourceSpec] = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            ResourceSpec(
                name="package-metadata",
                uri_template="package://{packageName}",
                description="Aggregate npm metadata of a package",
                mime_type=JSON_MIME,
                loader=_metadata,
            ),
            ResourceSpec(
                name="package-readme",
                uri_template="package://{packageName}/readme",
                description="README of a package's source repository",
                mime_type=MARKDOWN_MIME,
                loader=_readme,
            ),
            ResourceSpec(
                name="package-dependencies",
                uri_template="package://{packageName}/dependencies",
                description="Dependencies of the latest version of a package",
                mime_type=JSON_MIME,
                loader=_dependencies,
            ),
            ResourceSpec(
                name="package-versions",
                uri_template="package://{packageName}/versions",
                description="Published versions and dist-tags of a package",
                mime_type=JSON_MIME,
                loader=_versions,
            ),
        )
    }
)


def match_resource(uri: str) -> Optional[Tuple[ResourceSpec, str]]:
    """Find the resource addressed by ``uri``; returns (spec, decoded package name)."""
    for spec in RESOURCES.values():
        match = spec.pattern.match(uri)
        if match:
            return spec, urllib.parse.unquote(match.group("packageName"))
    return None


async def read_resource(services: NpmServices, uri: str) -> ResourceContent:
    matched = match_resource(uri)
    if matched is None:
        return ResourceContent(uri=uri, mime_type=TEXT_MIME, text=f"Unknown resource: {uri}")
    spec, package_name = matched
    return await spec.read(services, package_name)
