"""Declared shapes (JSON Schema Draft-07) for upstream responses and MCP tools.

Upstream shapes are structural: unknown extra fields are accepted, required
fields must be present with the declared kind, and open-ended mappings
(dependency lists, dist-tags, versions) only constrain their values.
"""

from __future__ import annotations

from typing import Any, Dict

from constants import Constants

_STRING_MAP: Dict[str, Any] = {"type": "object", "additionalProperties": {"type": "string"}}
_UNIT_FLOAT: Dict[str, Any] = {"type": "number", "minimum": 0, "maximum": 1}

# ----------------------------
# Upstream response shapes
# ----------------------------

# GET {registry}/{name}/{version}
VERSION_MANIFEST: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "version"],
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "description": {"type": "string"},
        "license": {"type": ["string", "object"]},
        "homepage": {"type": "string"},
        "keywords": {"type": "array", "items": {"type": "string"}},
        "maintainers": {"type": "array"},
        "repository": {"type": ["object", "string"]},
        "dependencies": _STRING_MAP,
        "devDependencies": _STRING_MAP,
        "peerDependencies": _STRING_MAP,
        "dist": {"type": "object", "properties": {"tarball": {"type": "string"}}},
    },
}

# One entry of a package document's ``versions`` map; name and version may be absent.
DOCUMENT_VERSION_ENTRY: Dict[str, Any] = {**VERSION_MANIFEST, "required": []}

# Same document, but README lookup needs a repository descriptor.
REGISTRY_RECORD: Dict[str, Any] = {
    **VERSION_MANIFEST,
    "properties": {
        **VERSION_MANIFEST["properties"],
        "repository": {
            "type": "object",
            "required": ["type", "url"],
            "properties": {"type": {"type": "string"}, "url": {"type": "string"}},
        },
    },
    "required": ["name", "version", "repository"],
}

# GET {registry}/{name}
PACKAGE_DOCUMENT: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "dist-tags", "versions"],
    "properties": {
        "name": {"type": "string"},
        "description": {"type": "string"},
        "dist-tags": {
            "type": "object",
            "required": ["latest"],
            "additionalProperties": {"type": "string"},
        },
        "versions": {"type": "object", "additionalProperties": {"type": "object"}},
        "time": _STRING_MAP,
        "maintainers": {"type": "array"},
        "keywords": {"type": "array", "items": {"type": "string"}},
        "license": {"type": ["string", "object"]},
        "homepage": {"type": "string"},
        "repository": {"type": ["object", "string"]},
    },
}

# GET {search}?text=...&size=...
SEARCH_RESULTS: Dict[str, Any] = {
    "type": "object",
    "required": ["objects", "total"],
    "properties": {
        "total": {"type": "integer", "minimum": 0},
        "objects": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["package"],
                "properties": {
                    "package": {
                        "type": "object",
                        "required": ["name", "version"],
                        "properties": {
                            "name": {"type": "string"},
                            "version": {"type": "string"},
                            "description": {"type": "string"},
                            "author": {
                                "type": "object",
                                "properties": {"name": {"type": "string"}},
                            },
                            "links": {
                                "type": "object",
                                "properties": {"npm": {"type": "string"}},
                            },
                        },
                    },
                },
            },
        },
    },
}

# GET {downloads}/{period}/{name}
DOWNLOAD_POINT: Dict[str, Any] = {
    "type": "object",
    "required": ["downloads", "start", "end", "package"],
    "properties": {
        "downloads": {"type": "integer", "minimum": 0},
        "start": {"type": "string"},
        "end": {"type": "string"},
        "package": {"type": "string"},
    },
}

# GET {bundle size}?package={name}@{version}
SIZE_REPORT: Dict[str, Any] = {
    "type": "object",
    "required": ["size", "gzip", "dependencyCount", "name", "version"],
    "properties": {
        "size": {"type": "number", "minimum": 0},
        "gzip": {"type": "number", "minimum": 0},
        "dependencyCount": {"type": "integer", "minimum": 0},
        "name": {"type": "string"},
        "version": {"type": "string"},
    },
}

# GET {npms}/{name}
QUALITY_SCORE: Dict[str, Any] = {
    "type": "object",
    "required": ["score"],
    "properties": {
        "score": {
            "type": "object",
            "required": ["final", "detail"],
            "properties": {
                "final": _UNIT_FLOAT,
                "detail": {
                    "type": "object",
                    "required": ["quality", "popularity", "maintenance"],
                    "properties": {
                        "quality": _UNIT_FLOAT,
                        "popularity": _UNIT_FLOAT,
                        "maintenance": _UNIT_FLOAT,
                    },
                },
            },
        },
    },
}

# ----------------------------
# Tool argument shapes
# ----------------------------

_PACKAGE_NAME: Dict[str, Any] = {"type": "string", "minLength": 1}
_VERSION: Dict[str, Any] = {"type": ["string", "null"], "minLength": 1}


def _tool_input(required, **properties) -> Dict[str, Any]:
    return {
        "type": "object",
        "required": list(required),
        "properties": properties,
        "additionalProperties": False,
    }


NAME_ONLY_INPUT = _tool_input(["packageName"], packageName=_PACKAGE_NAME)
NAME_VERSION_INPUT = _tool_input(["packageName"], packageName=_PACKAGE_NAME, version=_VERSION)
SEARCH_PACKAGES_INPUT = _tool_input(
    ["query"],
    query={"type": "string", "minLength": 1},
    limit={"type": "integer", "minimum": 1, "maximum": Constants.SEARCH_MAX_LIMIT},
)
DOWNLOAD_STATS_INPUT = _tool_input(
    ["packageName"],
    packageName=_PACKAGE_NAME,
    period={"type": "string", "enum": Constants.DOWNLOAD_PERIODS},
)
COMPARE_PACKAGES_INPUT = _tool_input(
    ["packageName1", "packageName2"],
    packageName1=_PACKAGE_NAME,
    packageName2=_PACKAGE_NAME,
)

# ----------------------------
# Tool structured output shapes
# ----------------------------

README_DATA_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["package", "version", "repository", "readme"],
    "properties": {
        "package": {"type": "string"},
        "version": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "repository": {"type": "string"},
        "readme": {"type": "string"},
    },
}

SEARCH_PACKAGES_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["total", "results"],
    "properties": {
        "total": {"type": "integer"},
        "results": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "version"],
                "properties": {
                    "name": {"type": "string"},
                    "version": {"type": "string"},
                    "description": {"type": ["string", "null"]},
                    "author": {"type": ["string", "null"]},
                    "npmUrl": {"type": ["string", "null"]},
                },
            },
        },
    },
}

PACKAGE_VERSIONS_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "latest", "distTags", "versions", "versionCount"],
    "properties": {
        "name": {"type": "string"},
        "latest": {"type": "string"},
        "distTags": _STRING_MAP,
        "versions": {"type": "array", "items": {"type": "string"}},
        "versionCount": {"type": "integer"},
    },
}

PACKAGE_DEPENDENCIES_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "version", "dependencies", "devDependencies", "peerDependencies"],
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "dependencies": _STRING_MAP,
        "devDependencies": _STRING_MAP,
        "peerDependencies": _STRING_MAP,
    },
}

DOWNLOAD_STATS_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["package", "downloads", "period", "start", "end"],
    "properties": {
        "package": {"type": "string"},
        "downloads": {"type": "integer"},
        "period": {"type": "string", "enum": Constants.DOWNLOAD_PERIODS},
        "start": {"type": "string"},
        "end": {"type": "string"},
    },
}

PACKAGE_INFO_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "version", "keywords", "maintainers"],
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "keywords": {"type": "array", "items": {"type": "string"}},
        "maintainers": {"type": "array", "items": {"type": "string"}},
        "totalVersions": {"type": "integer"},
        "distTags": _STRING_MAP,
    },
}

COMPARE_PACKAGES_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["packages"],
    "properties": {
        "packages": {
            "type": "array",
            "minItems": 2,
            "maxItems": 2,
            "items": {
                "type": "object",
                "required": ["name", "version", "downloads", "maintainers", "keywords"],
                "properties": {
                    "name": {"type": "string"},
                    "version": {"type": "string"},
                    "description": {"type": ["string", "null"]},
                    "downloads": {"type": "integer"},
                    "maintainers": {"type": "array", "items": {"type": "string"}},
                    "keywords": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
    },
}

PACKAGE_SIZE_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "version", "size", "gzip", "dependencyCount"],
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "size": {"type": "number"},
        "gzip": {"type": "number"},
        "dependencyCount": {"type": "integer"},
    },
}

PACKAGE_QUALITY_OUTPUT: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "final", "quality", "popularity", "maintenance"],
    "properties": {
        "name": {"type": "string"},
        "final": _UNIT_FLOAT,
        "quality": _UNIT_FLOAT,
        "popularity": _UNIT_FLOAT,
        "maintenance": _UNIT_FLOAT,
    },
}
