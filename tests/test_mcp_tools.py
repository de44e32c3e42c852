"""End-to-end tests of the tool registry against fake downstream services."""
import asyncio

import pytest

from mcp_tools import TOOLS, ToolResult, format_bytes

REG = "https://registry.npmjs.org"
RAW = "https://raw.githubusercontent.com/acme/example-pkg"


def invoke(services, name, **arguments):
    return asyncio.run(TOOLS[name].invoke(services, arguments))


class TestRegistry:

    def test_every_tool_is_registered(self):
        assert set(TOOLS) == {
            "get_readme_data",
            "search_packages",
            "get_package_versions",
            "get_package_dependencies",
            "get_download_stats",
            "get_package_info",
            "compare_packages",
            "get_package_size",
            "get_package_quality",
        }

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            TOOLS["extra"] = TOOLS["get_readme_data"]  # type: ignore[index]

    def test_every_tool_declares_argument_shape(self):
        for spec in TOOLS.values():
            assert spec.input_schema["type"] == "object"
            assert spec.input_schema["required"]


class TestGetReadmeData:

    def test_readme_from_master_branch(self, services, fake_http):
        fake_http.add(f"{REG}/example-pkg/1.0.0", {
            "name": "example-pkg",
            "version": "1.0.0",
            "description": "An example",
            "repository": {"type": "git", "url": "git+https://github.com/acme/example-pkg.git"},
        })
        fake_http.add(f"{RAW}/refs/heads/main/README.md", "404: Not Found", status=404)
        fake_http.add(f"{RAW}/refs/heads/master/README.md", "# Example from master")

        result = invoke(services, "get_readme_data", packageName="example-pkg", version="1.0.0")

        assert not result.is_error
        assert result.structured == {
            "package": "example-pkg",
            "version": "1.0.0",
            "description": "An example",
            "repository": "https://github.com/acme/example-pkg.git",
            "readme": "# Example from master",
        }
        assert "Version: 1.0.0" in result.text
        assert "# Example from master" in result.text
        assert fake_http.requests[1:] == [
            f"{RAW}/refs/heads/main/README.md",
            f"{RAW}/refs/heads/master/README.md",
        ]

    def test_missing_repository_url_never_reaches_resolver(self, services, fake_http):
        fake_http.add(f"{REG}/example-pkg/latest", {
            "name": "example-pkg", "version": "1.0.0", "repository": {"type": "git"}
        })
        result = invoke(services, "get_readme_data", packageName="example-pkg")
        assert result.is_error
        assert result.structured is None
        assert result.text.startswith("Error fetching package example-pkg: Invalid package data structure")
        assert fake_http.requests == [f"{REG}/example-pkg/latest"]

    def test_readme_not_found_is_error_flagged(self, services, fake_http):
        fake_http.add(f"{REG}/example-pkg/latest", {
            "name": "example-pkg",
            "version": "1.0.0",
            "repository": {"type": "git", "url": "https://github.com/acme/example-pkg"},
        })
        result = invoke(services, "get_readme_data", packageName="example-pkg")
        assert result.is_error
        assert "README not found in main, master, or default branch." in result.text


class TestSearchPackages:

    def test_results_in_response_order(self, services, fake_http):
        fake_http.add(f"{REG}/-/v1/search?text=state%20management&size=2", {
            "total": 500,
            "objects": [
                {"package": {
                    "name": "redux",
                    "version": "5.0.1",
                    "description": "Predictable state container",
                    "author": {"name": "Dan"},
                    "links": {"npm": "https://www.npmjs.com/package/redux"},
                }},
                {"package": {"name": "zustand", "version": "4.5.0"}},
            ],
        })
        result = invoke(services, "search_packages", query="state management", limit=2)
        assert result.structured == {
            "total": 500,
            "results": [
                {
                    "name": "redux",
                    "version": "5.0.1",
                    "description": "Predictable state container",
                    "author": "Dan",
                    "npmUrl": "https://www.npmjs.com/package/redux",
                },
                {"name": "zustand", "version": "4.5.0"},
            ],
        }
        assert result.text.index("redux") < result.text.index("zustand")

    def test_default_limit(self, services, fake_http):
        fake_http.add(f"{REG}/-/v1/search?text=x&size=20", {"total": 0, "objects": []})
        result = invoke(services, "search_packages", query="x")
        assert result.structured == {"total": 0, "results": []}

    def test_limit_out_of_range(self, services, fake_http):
        result = invoke(services, "search_packages", query="x", limit=0)
        assert result.is_error
        assert fake_http.requests == []


class TestVersionsAndDependencies:

    DOCUMENT = {
        "name": "pkg",
        "dist-tags": {"latest": "1.1.0", "next": "2.0.0-rc.1"},
        "versions": {"1.0.0": {}, "1.1.0": {}, "2.0.0-rc.1": {}},
        "time": {
            "created": "2020-01-01T00:00:00.000Z",
            "1.0.0": "2020-01-01T00:00:00.000Z",
            "1.1.0": "2021-01-01T00:00:00.000Z",
            "2.0.0-rc.1": "2022-01-01T00:00:00.000Z",
        },
    }

    def test_versions(self, services, fake_http):
        fake_http.add(f"{REG}/pkg", self.DOCUMENT)
        result = invoke(services, "get_package_versions", packageName="pkg")
        assert result.structured == {
            "name": "pkg",
            "latest": "1.1.0",
            "distTags": {"latest": "1.1.0", "next": "2.0.0-rc.1"},
            "versions": ["1.0.0", "1.1.0", "2.0.0-rc.1"],
            "versionCount": 3,
        }

    def test_versions_text_lists_recent_first_with_publish_times(self, services, fake_http):
        fake_http.add(f"{REG}/pkg", self.DOCUMENT)
        text = invoke(services, "get_package_versions", packageName="pkg").text
        assert "Recent versions:" in text
        recent = text.split("Recent versions:")[1]
        assert recent.index("2.0.0-rc.1") < recent.index("1.1.0") < recent.index("1.0.0")
        assert "1.1.0 (published 2021-01-01T00:00:00.000Z)" in recent

    def test_versions_are_idempotent(self, services, fake_http):
        fake_http.add(f"{REG}/pkg", self.DOCUMENT)
        first = invoke(services, "get_package_versions", packageName="pkg")
        second = invoke(services, "get_package_versions", packageName="pkg")
        assert first.structured["versions"] == second.structured["versions"]
        assert first.structured["distTags"] == second.structured["distTags"]
        assert len(fake_http.requests) == 2

    def test_absent_peer_dependencies_become_empty(self, services, fake_http):
        fake_http.add(f"{REG}/%40types%2Fnode/latest", {
            "name": "@types/node",
            "version": "20.11.0",
            "dependencies": {"undici-types": "~5.26.4"},
        })
        result = invoke(services, "get_package_dependencies", packageName="@types/node")
        assert not result.is_error
        assert result.structured == {
            "name": "@types/node",
            "version": "20.11.0",
            "dependencies": {"undici-types": "~5.26.4"},
            "devDependencies": {},
            "peerDependencies": {},
        }
        assert "Peer dependencies (0): none" in result.text


class TestDownloadStats:

    def test_default_period(self, services, fake_http):
        fake_http.add("https://api.npmjs.org/downloads/point/last-month/react", {
            "downloads": 1000000, "start": "2024-01-01", "end": "2024-01-31", "package": "react"
        })
        result = invoke(services, "get_download_stats", packageName="react")
        assert result.structured == {
            "package": "react",
            "downloads": 1000000,
            "period": "last-month",
            "start": "2024-01-01",
            "end": "2024-01-31",
        }
        assert "1,000,000" in result.text

    def test_unknown_period_rejected_without_request(self, services, fake_http):
        result = invoke(services, "get_download_stats", packageName="react", period="yesterday")
        assert result.is_error
        assert "period" in result.text
        assert fake_http.requests == []


class TestPackageInfo:

    def test_aggregate_metadata(self, services, fake_http):
        fake_http.add(f"{REG}/pkg", {
            "name": "pkg",
            "description": "A package",
            "dist-tags": {"latest": "1.0.0"},
            "versions": {"0.9.0": {}, "1.0.0": {"license": "MIT", "keywords": ["a", "b"]}},
            "maintainers": [{"name": "alice"}, "bob <bob@example.test>"],
            "repository": {"type": "git", "url": "git+https://github.com/o/pkg.git"},
            "time": {"created": "2020-01-01", "modified": "2024-01-01"},
        })
        result = invoke(services, "get_package_info", packageName="pkg")
        data = result.structured
        assert data["version"] == "1.0.0"
        assert data["license"] == "MIT"
        assert data["keywords"] == ["a", "b"]
        assert data["maintainers"] == ["alice", "bob"]
        assert data["totalVersions"] == 2
        assert data["distTags"] == {"latest": "1.0.0"}
        assert data["repository"] == "git+https://github.com/o/pkg.git"

    def test_version_specific_metadata(self, services, fake_http):
        fake_http.add(f"{REG}/pkg/0.9.0", {
            "name": "pkg",
            "version": "0.9.0",
            "license": {"type": "ISC"},
            "dependencies": {"a": "^1.0.0", "b": "^2.0.0"},
            "dist": {"tarball": "https://registry.npmjs.org/pkg/-/pkg-0.9.0.tgz"},
        })
        result = invoke(services, "get_package_info", packageName="pkg", version="0.9.0")
        data = result.structured
        assert data["version"] == "0.9.0"
        assert data["license"] == "ISC"
        assert data["dependencyCount"] == 2
        assert data["keywords"] == []
        assert "totalVersions" not in data

    def test_aggregate_rejects_string_keywords_in_latest_manifest(self, services, fake_http):
        fake_http.add(f"{REG}/pkg", {
            "name": "pkg",
            "dist-tags": {"latest": "1.0.0"},
            "versions": {"1.0.0": {"keywords": "state management"}},
        })
        result = invoke(services, "get_package_info", packageName="pkg")
        assert result.is_error
        assert result.structured is None
        assert "Invalid version manifest data structure at 'keywords'" in result.text


class TestComparePackages:

    def test_structured_pair(self, services, fake_http):
        for name, version, count in (("a", "1.0.0", 5), ("b", "2.0.0", 7)):
            fake_http.add(f"{REG}/{name}", {
                "name": name,
                "dist-tags": {"latest": version},
                "versions": {version: {"description": f"pkg {name}"}},
            })
            fake_http.add(f"https://api.npmjs.org/downloads/point/last-month/{name}", {
                "downloads": count, "start": "s", "end": "e", "package": name
            })
        result = invoke(services, "compare_packages", packageName1="b", packageName2="a")
        assert [p["name"] for p in result.structured["packages"]] == ["b", "a"]
        assert result.structured["packages"][0]["downloads"] == 7

    def test_failure_names_both_packages(self, services):
        result = invoke(services, "compare_packages", packageName1="a", packageName2="b")
        assert result.is_error
        assert result.text.startswith("Error comparing packages a and b:")

    def test_string_keywords_in_latest_manifest_fail_the_comparison(self, services, fake_http):
        for name in ("a", "b"):
            fake_http.add(f"{REG}/{name}", {
                "name": name,
                "dist-tags": {"latest": "1.0.0"},
                "versions": {"1.0.0": {"keywords": "state management" if name == "b" else ["x"]}},
            })
            fake_http.add(f"https://api.npmjs.org/downloads/point/last-month/{name}", {
                "downloads": 1, "start": "s", "end": "e", "package": name
            })
        result = invoke(services, "compare_packages", packageName1="a", packageName2="b")
        assert result.is_error
        assert result.structured is None
        assert "keywords" in result.text


class TestSizeAndQuality:

    def test_size(self, services, fake_http):
        fake_http.add(f"{REG}/pkg/latest", {"name": "pkg", "version": "1.2.3"})
        fake_http.add("https://bundlephobia.com/api/size?package=pkg%401.2.3", {
            "name": "pkg", "version": "1.2.3", "size": 2048, "gzip": 900, "dependencyCount": 0
        })
        result = invoke(services, "get_package_size", packageName="pkg")
        assert result.structured == {
            "name": "pkg", "version": "1.2.3", "size": 2048, "gzip": 900, "dependencyCount": 0
        }
        assert "2.0 kB" in result.text

    def test_quality(self, services, fake_http):
        fake_http.add("https://api.npms.io/v2/package/pkg", {
            "score": {"final": 0.5, "detail": {"quality": 0.25, "popularity": 0.75, "maintenance": 1}}
        })
        result = invoke(services, "get_package_quality", packageName="pkg")
        assert result.structured == {
            "name": "pkg", "final": 0.5, "quality": 0.25, "popularity": 0.75, "maintenance": 1.0
        }
        assert "Overall: 50%" in result.text


def test_unexpected_exceptions_are_contained(services, monkeypatch):
    async def explode(*args, **kwargs):
        raise KeyError("surprise")

    monkeypatch.setattr(services.quality, "get_quality", explode)
    result = invoke(services, "get_package_quality", packageName="pkg")
    assert isinstance(result, ToolResult)
    assert result.is_error
    assert "surprise" in result.text


def test_format_bytes():
    assert format_bytes(512) == "512 B"
    assert format_bytes(1536) == "1.5 kB"
    assert format_bytes(3 * 1024 * 1024) == "3.00 MB"
