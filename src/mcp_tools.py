"""Tool registry for the npm context MCP server.

Each tool maps a name to its argument shape, its structured output shape and
an async handler. Handlers return a human-readable summary together with a
structured payload carrying the same facts. ``ToolSpec.invoke`` is the error
boundary: any failure becomes an error-flagged result, nothing is raised to
the transport.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, Timer
from mcp_schemas import (
    COMPARE_PACKAGES_INPUT,
    COMPARE_PACKAGES_OUTPUT,
    DOWNLOAD_STATS_INPUT,
    DOWNLOAD_STATS_OUTPUT,
    NAME_ONLY_INPUT,
    NAME_VERSION_INPUT,
    PACKAGE_DEPENDENCIES_OUTPUT,
    PACKAGE_INFO_OUTPUT,
    PACKAGE_QUALITY_OUTPUT,
    PACKAGE_SIZE_OUTPUT,
    PACKAGE_VERSIONS_OUTPUT,
    README_DATA_OUTPUT,
    SEARCH_PACKAGES_INPUT,
    SEARCH_PACKAGES_OUTPUT,
)
from mcp_validate import validate_input, validate_output
from registry.npm.client import latest_manifest
from registry.npm.models import VersionSet, license_name, person_name, repository_url
from repository.readme import normalize_repository_url
from services import NpmServices

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]
Handler = Callable[[NpmServices, Payload], Awaitable[Tuple[str, Payload]]]


@dataclass(frozen=True)
class ToolResult:
    """Dual output of a tool call; ``structured`` is None on failure."""
    text: str
    structured: Optional[Payload] = None
    is_error: bool = False

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(text=message, structured=None, is_error=True)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    title: str
    description: str
    input_schema: Payload
    output_schema: Payload
    handler: Handler
    action: str = "fetching package"
    subject_keys: Tuple[str, ...] = ("packageName",)

    def subject(self, arguments: Payload) -> str:
        return " and ".join(str(arguments.get(k)) for k in self.subject_keys)

    async def invoke(self, services: NpmServices, arguments: Payload) -> ToolResult:
        """Validate ``arguments``, run the handler and package its dual output."""
        arguments = {k: v for k, v in (arguments or {}).items() if v is not None}
        with Timer() as t:
            try:
                validate_input(self.input_schema, arguments)
                text, structured = await self.handler(services, arguments)
                validate_output(self.output_schema, structured)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                message = str(exc) or exc.__class__.__name__
                logger.warning(
                    "Tool %s failed: %s",
                    self.name,
                    message,
                    extra=extra_context(
                        event="tool_call", component="tools", action=self.name, outcome="error"
                    ),
                )
                return ToolResult.failure(f"Error {self.action} {self.subject(arguments)}: {message}")
        logger.info(
            "Tool %s completed in %d ms",
            self.name,
            t.duration_ms(),
            extra=extra_context(event="tool_call", component="tools", action=self.name, outcome="success"),
        )
        return ToolResult(text=text, structured=structured)


# ----------------------------
# Formatting helpers
# ----------------------------

def _or_na(value: Any) -> str:
    return str(value) if value not in (None, "", [], {}) else "N/A"


def format_bytes(size: float) -> str:
    if size < 1024:
        return f"{int(size)} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} kB"
    return f"{size / (1024 * 1024):.2f} MB"


def _format_mapping(title: str, mapping: Mapping[str, str]) -> str:
    if not mapping:
        return f"{title} (0): none"
    lines = [f"{title} ({len(mapping)}):"]
    lines.extend(f"  {name}: {spec}" for name, spec in mapping.items())
    return "\n".join(lines)


def _names(people: Any) -> List[str]:
    if not isinstance(people, list):
        return []
    return [n for n in (person_name(p) for p in people) if n]


# ----------------------------
# Payload builders (shared with resources)
# ----------------------------

async def readme_data(services: NpmServices, name: str, version: Optional[str]) -> Payload:
    record = await services.registry.get_record(name, version)
    readme = await services.readme.resolve(record.repository_url or "")
    return {
        "package": record.name,
        "version": record.version,
        "description": record.description,
        "repository": normalize_repository_url(record.repository_url or ""),
        "readme": readme,
    }


def _versions_payload(version_set: VersionSet) -> Payload:
    versions = version_set.version_names()
    return {
        "name": version_set.name,
        "latest": version_set.latest,
        "distTags": dict(version_set.dist_tags),
        "versions": versions,
        "versionCount": len(versions),
    }


async def versions_data(services: NpmServices, name: str) -> Payload:
    return _versions_payload(await services.registry.get_version_set(name))


async def dependencies_data(services: NpmServices, name: str, version: Optional[str]) -> Payload:
    manifest, deps = await services.registry.get_dependencies(name, version)
    return {
        "name": manifest["name"],
        "version": manifest["version"],
        "dependencies": deps.dependencies,
        "devDependencies": deps.dev_dependencies,
        "peerDependencies": deps.peer_dependencies,
    }


async def package_info_data(services: NpmServices, name: str, version: Optional[str]) -> Payload:
    """Version-specific metadata when ``version`` is given, aggregate otherwise."""
    if version:
        manifest = await services.registry.get_manifest(name, version)
        dist = manifest.get("dist") or {}
        return {
            "name": manifest["name"],
            "version": manifest["version"],
            "description": manifest.get("description"),
            "license": license_name(manifest.get("license")),
            "keywords": list(manifest.get("keywords") or []),
            "maintainers": _names(manifest.get("maintainers")),
            "author": person_name(manifest.get("author")),
            "repository": repository_url(manifest.get("repository")),
            "homepage": manifest.get("homepage"),
            "deprecated": manifest.get("deprecated"),
            "tarball": dist.get("tarball"),
            "dependencyCount": len(manifest.get("dependencies") or {}),
        }

    document = await services.registry.get_document(name)
    latest = document["dist-tags"]["latest"]
    manifest = latest_manifest(document)
    times = document.get("time") or {}
    return {
        "name": document["name"],
        "version": latest,
        "description": document.get("description") or manifest.get("description"),
        "license": license_name(document.get("license") or manifest.get("license")),
        "keywords": list(document.get("keywords") or manifest.get("keywords") or []),
        "maintainers": _names(document.get("maintainers")),
        "author": person_name(document.get("author") or manifest.get("author")),
        "repository": repository_url(document.get("repository") or manifest.get("repository")),
        "homepage": document.get("homepage") or manifest.get("homepage"),
        "totalVersions": len(document["versions"]),
        "distTags": dict(document["dist-tags"]),
        "created": times.get("created"),
        "modified": times.get("modified"),
    }


# ----------------------------
# Tool handlers
# ----------------------------

async def get_readme_data(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    data = await readme_data(services, args["packageName"], args.get("version"))
    text = (
        f"Package: {data['package']}\n"
        f"Version: {data['version']}\n"
        f"Description: {_or_na(data['description'])}\n"
        f"Repository: {data['repository']}\n\n"
        f"README:\n{data['readme']}"
    )
    return text, data


async def search_packages(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    query = args["query"]
    objects, total = await services.registry.search_packages(
        query, args.get("limit", Constants.SEARCH_DEFAULT_LIMIT)
    )
    results = []
    for obj in objects:
        pkg = obj["package"]
        entry = {"name": pkg["name"], "version": pkg["version"]}
        if pkg.get("description"):
            entry["description"] = pkg["description"]
        author = person_name(pkg.get("author"))
        if author:
            entry["author"] = author
        npm_url = (pkg.get("links") or {}).get("npm")
        if npm_url:
            entry["npmUrl"] = npm_url
        results.append(entry)

    lines = [f'Found {total} packages matching "{query}" (showing {len(results)}):']
    for idx, entry in enumerate(results, start=1):
        lines.append("")
        lines.append(f"{idx}. {entry['name']}@{entry['version']}")
        lines.append(f"   {_or_na(entry.get('description'))}")
        if entry.get("author"):
            lines.append(f"   Author: {entry['author']}")
        if entry.get("npmUrl"):
            lines.append(f"   {entry['npmUrl']}")
    return "\n".join(lines), {"total": total, "results": results}


async def get_package_versions(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    version_set = await services.registry.get_version_set(args["packageName"])
    data = _versions_payload(version_set)
    lines = [
        f"Package: {data['name']}",
        f"Latest: {data['latest']}",
        f"Total versions: {data['versionCount']}",
        "",
        "Dist-tags:",
    ]
    lines.extend(f"  {tag}: {ver}" for tag, ver in data["distTags"].items())
    lines.append("")
    lines.append("Recent versions:")
    for ver in version_set.recent():
        published = version_set.times.get(ver)
        lines.append(f"  {ver} (published {published})" if published else f"  {ver}")
    return "\n".join(lines), data


async def get_package_dependencies(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    data = await dependencies_data(services, args["packageName"], args.get("version"))
    text = "\n\n".join(
        [
            f"Package: {data['name']}@{data['version']}",
            _format_mapping("Dependencies", data["dependencies"]),
            _format_mapping("Dev dependencies", data["devDependencies"]),
            _format_mapping("Peer dependencies", data["peerDependencies"]),
        ]
    )
    return text, data


async def get_download_stats(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    period = args.get("period", Constants.DEFAULT_DOWNLOAD_PERIOD)
    point = await services.downloads.get_downloads(args["packageName"], period)
    data = {
        "package": point.package,
        "downloads": point.downloads,
        "period": point.period,
        "start": point.start,
        "end": point.end,
    }
    text = (
        f"Package: {point.package}\n"
        f"Period: {point.period} ({point.start} to {point.end})\n"
        f"Downloads: {point.downloads:,}"
    )
    return text, data


async def get_package_info(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    data = await package_info_data(services, args["packageName"], args.get("version"))
    lines = [
        f"Package: {data['name']}",
        f"Version: {data['version']}",
        f"Description: {_or_na(data.get('description'))}",
        f"License: {_or_na(data.get('license'))}",
        f"Author: {_or_na(data.get('author'))}",
        f"Homepage: {_or_na(data.get('homepage'))}",
        f"Repository: {_or_na(data.get('repository'))}",
        f"Keywords: {', '.join(data['keywords']) or 'N/A'}",
        f"Maintainers: {', '.join(data['maintainers']) or 'N/A'}",
    ]
    if "totalVersions" in data:
        lines.append(f"Total versions: {data['totalVersions']}")
        tags = ", ".join(f"{tag}={ver}" for tag, ver in data["distTags"].items())
        lines.append(f"Dist-tags: {tags}")
        if data.get("modified"):
            lines.append(f"Last modified: {data['modified']}")
    else:
        lines.append(f"Dependencies: {data['dependencyCount']}")
        if data.get("deprecated"):
            lines.append(f"Deprecated: {data['deprecated']}")
    return "\n".join(lines), data


async def compare_packages(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    first, second = await services.comparison.compare(args["packageName1"], args["packageName2"])
    blocks = []
    for entry in (first, second):
        blocks.append(
            f"{entry.name}@{entry.version}\n"
            f"  Description: {_or_na(entry.description)}\n"
            f"  Downloads (last month): {entry.downloads:,}\n"
            f"  Maintainers: {', '.join(entry.maintainers) or 'N/A'}\n"
            f"  Keywords: {', '.join(entry.keywords) or 'N/A'}"
        )
    text = "Package comparison:\n\n" + "\n\n".join(blocks)
    return text, {"packages": [first.to_dict(), second.to_dict()]}


async def get_package_size(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    report = await services.size.get_size(args["packageName"], args.get("version"))
    data = {
        "name": report.name,
        "version": report.version,
        "size": report.size,
        "gzip": report.gzip,
        "dependencyCount": report.dependency_count,
    }
    text = (
        f"Package: {report.name}@{report.version}\n"
        f"Minified: {format_bytes(report.size)} ({report.size} bytes)\n"
        f"Gzipped: {format_bytes(report.gzip)} ({report.gzip} bytes)\n"
        f"Dependencies: {report.dependency_count}"
    )
    return text, data


async def get_package_quality(services: NpmServices, args: Payload) -> Tuple[str, Payload]:
    score = await services.quality.get_quality(args["packageName"])
    data = {
        "name": score.name,
        "final": score.final,
        "quality": score.quality,
        "popularity": score.popularity,
        "maintenance": score.maintenance,
    }
    text = (
        f"Package: {score.name}\n"
        f"Overall: {score.final:.0%}\n"
        f"Quality: {score.quality:.0%}\n"
        f"Popularity: {score.popularity:.0%}\n"
        f"Maintenance: {score.maintenance:.0%}"
    )
    return text, data


TOOLS: Mapping[str, ToolSpec] = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            ToolSpec(
                name="get_readme_data",
                title="Get README Data",
                description="Get the README and basic metadata of an npm package",
                input_schema=NAME_VERSION_INPUT,
                output_schema=README_DATA_OUTPUT,
                handler=get_readme_data,
            ),
            ToolSpec(
                name="search_packages",
                title="Search Packages",
                description="Search the npm registry for packages matching a query",
                input_schema=SEARCH_PACKAGES_INPUT,
                output_schema=SEARCH_PACKAGES_OUTPUT,
                handler=search_packages,
                action="searching packages for",
                subject_keys=("query",),
            ),
            ToolSpec(
                name="get_package_versions",
                title="Get Package Versions",
                description="List every published version and dist-tag of an npm package",
                input_schema=NAME_ONLY_INPUT,
                output_schema=PACKAGE_VERSIONS_OUTPUT,
                handler=get_package_versions,
            ),
            ToolSpec(
                name="get_package_dependencies",
                title="Get Package Dependencies",
                description="Get runtime, dev and peer dependencies of an npm package version",
                input_schema=NAME_VERSION_INPUT,
                output_schema=PACKAGE_DEPENDENCIES_OUTPUT,
                handler=get_package_dependencies,
            ),
            ToolSpec(
                name="get_download_stats",
                title="Get Download Stats",
                description="Get download counts of an npm package for last-day, last-week or last-month",
                input_schema=DOWNLOAD_STATS_INPUT,
                output_schema=DOWNLOAD_STATS_OUTPUT,
                handler=get_download_stats,
                action="fetching download stats for",
            ),
            ToolSpec(
                name="get_package_info",
                title="Get Package Info",
                description="Get detailed metadata of an npm package, optionally for one version",
                input_schema=NAME_VERSION_INPUT,
                output_schema=PACKAGE_INFO_OUTPUT,
                handler=get_package_info,
            ),
            ToolSpec(
                name="compare_packages",
                title="Compare Packages",
                description="Compare two npm packages side by side",
                input_schema=COMPARE_PACKAGES_INPUT,
                output_schema=COMPARE_PACKAGES_OUTPUT,
                handler=compare_packages,
                action="comparing packages",
                subject_keys=("packageName1", "packageName2"),
            ),
            ToolSpec(
                name="get_package_size",
                title="Get Package Size",
                description="Get minified and gzipped bundle size of an npm package",
                input_schema=NAME_VERSION_INPUT,
                output_schema=PACKAGE_SIZE_OUTPUT,
                handler=get_package_size,
                action="fetching bundle size for",
            ),
            ToolSpec(
                name="get_package_quality",
                title="Get Package Quality",
                description="Get npms.io quality, popularity and maintenance scores of an npm package",
                input_schema=NAME_ONLY_INPUT,
                output_schema=PACKAGE_QUALITY_OUTPUT,
                handler=get_package_quality,
                action="fetching quality score for",
            ),
        )
    }
)
