"""MCP server exposing npm package context via the official MCP Python SDK.

Tools, resources and prompts come from the immutable registries in
``mcp_tools``, ``mcp_resources`` and ``mcp_prompts``; this module only binds
them to FastMCP and runs the selected transport(s). Tool results carry both a
text block and ``structuredContent``; failures come back with ``isError`` set.

Transport defaults to stdio JSON-RPC. ``http`` serves streamable HTTP and
``both`` runs the two side by side on one event loop.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import CallToolResult, TextContent

from cli_config import ServerConfig
from constants import Constants
from mcp_prompts import PROMPTS
from mcp_resources import RESOURCES, match_resource, read_resource
from mcp_tools import TOOLS, ToolResult
from services import NpmServices

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Look up npm packages: README, versions, dependencies, download counts, "
    "bundle size and quality scores. Percent-encode scoped names in resource URIs."
)


def to_call_tool_result(result: ToolResult) -> CallToolResult:
    """Convert a registry result into the MCP wire shape."""
    return CallToolResult(
        content=[TextContent(type="text", text=result.text)],
        structuredContent=result.structured,
        isError=result.is_error,
    )


class NpmContextServer(FastMCP):
    """FastMCP whose ``package://`` reads report the MIME type of each read.

    Templates are still registered on the base class so they are listed;
    reads go through ``mcp_resources.read_resource``, which answers
    ``text/plain`` when loading fails.
    """

    def __init__(self, services: NpmServices, **settings: Any):
        super().__init__(Constants.SERVER_NAME, instructions=INSTRUCTIONS, **settings)
        self.npm_services = services

    async def read_resource(self, uri: Any) -> Iterable[ReadResourceContents]:
        uri = str(uri)
        if match_resource(uri) is None:
            return await super().read_resource(uri)
        content = await read_resource(self.npm_services, uri)
        return [ReadResourceContents(content=content.text, mime_type=content.mime_type)]


def create_server(services: NpmServices, config: Optional[ServerConfig] = None) -> NpmContextServer:
    """Build the MCP server bound to ``services``."""
    mcp = NpmContextServer(services)
    if config is not None:
        mcp.settings.host = config.host
        mcp.settings.port = config.port

    async def _call(name: str, **arguments: Any) -> CallToolResult:
        spec = TOOLS[name]
        return to_call_tool_result(await spec.invoke(services, arguments))

    def _tool(name: str):
        spec = TOOLS[name]
        return mcp.tool(name=spec.name, title=spec.title, description=spec.description)

    @_tool("get_readme_data")
    async def get_readme_data(packageName: str, version: Optional[str] = None) -> CallToolResult:
        return await _call("get_readme_data", packageName=packageName, version=version)

    @_tool("search_packages")
    async def search_packages(query: str, limit: int = Constants.SEARCH_DEFAULT_LIMIT) -> CallToolResult:
        return await _call("search_packages", query=query, limit=limit)

    @_tool("get_package_versions")
    async def get_package_versions(packageName: str) -> CallToolResult:
        return await _call("get_package_versions", packageName=packageName)

    @_tool("get_package_dependencies")
    async def get_package_dependencies(packageName: str, version: Optional[str] = None) -> CallToolResult:
        return await _call("get_package_dependencies", packageName=packageName, version=version)

    @_tool("get_download_stats")
    async def get_download_stats(
        packageName: str, period: str = Constants.DEFAULT_DOWNLOAD_PERIOD
    ) -> CallToolResult:
        return await _call("get_download_stats", packageName=packageName, period=period)

    @_tool("get_package_info")
    async def get_package_info(packageName: str, version: Optional[str] = None) -> CallToolResult:
        return await _call("get_package_info", packageName=packageName, version=version)

    @_tool("compare_packages")
    async def compare_packages(packageName1: str, packageName2: str) -> CallToolResult:
        return await _call("compare_packages", packageName1=packageName1, packageName2=packageName2)

    @_tool("get_package_size")
    async def get_package_size(packageName: str, version: Optional[str] = None) -> CallToolResult:
        return await _call("get_package_size", packageName=packageName, version=version)

    @_tool("get_package_quality")
    async def get_package_quality(packageName: str) -> CallToolResult:
        return await _call("get_package_quality", packageName=packageName)

    def _resource(name: str):
        spec = RESOURCES[name]
        return mcp.resource(
            spec.uri_template, name=spec.name, description=spec.description, mime_type=spec.mime_type
        )

    @_resource("package-metadata")
    async def package_metadata(packageName: str) -> str:
        return (await RESOURCES["package-metadata"].read(services, packageName)).text

    @_resource("package-readme")
    async def package_readme(packageName: str) -> str:
        return (await RESOURCES["package-readme"].read(services, packageName)).text

    @_resource("package-dependencies")
    async def package_dependencies(packageName: str) -> str:
        return (await RESOURCES["package-dependencies"].read(services, packageName)).text

    @_resource("package-versions")
    async def package_versions(packageName: str) -> str:
        return (await RESOURCES["package-versions"].read(services, packageName)).text

    @mcp.prompt(name="analyze_package", description=PROMPTS["analyze_package"].description)
    def analyze_package(packageName: str) -> str:
        return PROMPTS["analyze_package"].render(packageName=packageName)

    @mcp.prompt(name="compare_packages_prompt", description=PROMPTS["compare_packages_prompt"].description)
    def compare_packages_prompt(packageName1: str, packageName2: str) -> str:
        return PROMPTS["compare_packages_prompt"].render(
            packageName1=packageName1, packageName2=packageName2
        )

    @mcp.prompt(name="audit_dependencies", description=PROMPTS["audit_dependencies"].description)
    def audit_dependencies(packageName: str) -> str:
        return PROMPTS["audit_dependencies"].render(packageName=packageName)

    return mcp


async def serve(config: ServerConfig, services: Optional[NpmServices] = None) -> None:
    """Run the configured transport(s) until they stop, then close upstream sessions."""
    services = services or NpmServices.create()
    mcp = create_server(services, config)
    runners = []
    if config.serves_stdio:
        runners.append(mcp.run_stdio_async())
    if config.serves_http:
        logger.info("Serving streamable HTTP on %s:%s", config.host, config.port)
        runners.append(mcp.run_streamable_http_async())
    logger.info("%s server started (transport=%s)", Constants.SERVER_NAME, config.transport)
    try:
        await asyncio.gather(*runners)
    finally:
        await services.aclose()


def run_mcp_server(config: ServerConfig) -> None:
    asyncio.run(serve(config))


def registry_summary() -> Dict[str, Any]:
    """Names exposed by the server, for diagnostics."""
    return {
        "tools": sorted(TOOLS),
        "resources": sorted(spec.uri_template for spec in RESOURCES.values()),
        "prompts": sorted(PROMPTS),
    }
