"""Request-scoped data models built from validated npm service payloads."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from constants import Constants


def person_name(person: Any) -> Optional[str]:
    """Name of an npm person field, given as ``{"name": ...}`` or "Name <email> (url)"."""
    if isinstance(person, dict):
        name = person.get("name")
        return str(name) if name else None
    if isinstance(person, str) and person.strip():
        return person.split("<", 1)[0].split("(", 1)[0].strip() or None
    return None


def license_name(value: Any) -> Optional[str]:
    """npm allows ``license`` as an SPDX string or a legacy ``{"type": ...}`` object."""
    if isinstance(value, dict):
        value = value.get("type")
    return str(value) if value else None


def repository_url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("url")
    return str(value) if value else None


@dataclass(frozen=True)
class PackageIdentifier:
    """Package name (possibly ``@scope/name``) plus an optional version or tag."""
    name: str
    version: Optional[str] = None

    @property
    def version_or_latest(self) -> str:
        return self.version or "latest"

    def __str__(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name


@dataclass(frozen=True)
class RegistryRecord:
    """Version manifest of one published version."""
    name: str
    version: str
    description: Optional[str]
    repository: Optional[Dict[str, Any]]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "RegistryRecord":
        return cls(
            name=data["name"],
            version=data["version"],
            description=data.get("description"),
            repository=data.get("repository"),
        )

    @property
    def repository_url(self) -> Optional[str]:
        return repository_url(self.repository)


@dataclass(frozen=True)
class VersionSet:
    """All published versions of a package and its dist-tags."""
    name: str
    versions: Dict[str, Dict[str, Any]]
    dist_tags: Dict[str, str]
    times: Dict[str, str]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "VersionSet":
        return cls(
            name=data["name"],
            versions=dict(data["versions"]),
            dist_tags=dict(data["dist-tags"]),
            times=dict(data.get("time") or {}),
        )

    @property
    def latest(self) -> str:
        return self.dist_tags["latest"]

    def version_names(self) -> List[str]:
        return list(self.versions.keys())

    def recent(self, limit: int = Constants.RECENT_VERSIONS_SHOWN) -> List[str]:
        """Most recently published versions, newest first; registry order if no times."""
        names = self.version_names()
        if all(v in self.times for v in names):
            names = sorted(names, key=lambda v: self.times[v])
        return list(reversed(names))[:limit]


@dataclass(frozen=True)
class DependencyTriple:
    """Runtime, dev and peer dependency ranges of one version."""
    dependencies: Dict[str, str]
    dev_dependencies: Dict[str, str]
    peer_dependencies: Dict[str, str]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "DependencyTriple":
        return cls(
            dependencies=dict(data.get("dependencies") or {}),
            dev_dependencies=dict(data.get("devDependencies") or {}),
            peer_dependencies=dict(data.get("peerDependencies") or {}),
        )


@dataclass(frozen=True)
class DownloadPoint:
    """Download count of one package over one fixed period."""
    package: str
    downloads: int
    start: str
    end: str
    period: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any], period: str) -> "DownloadPoint":
        return cls(
            package=data["package"],
            downloads=int(data["downloads"]),
            start=data["start"],
            end=data["end"],
            period=period,
        )


@dataclass(frozen=True)
class SizeReport:
    """Bundle size of one resolved version, in bytes."""
    name: str
    version: str
    size: int
    gzip: int
    dependency_count: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SizeReport":
        return cls(
            name=data["name"],
            version=data["version"],
            size=int(data["size"]),
            gzip=int(data["gzip"]),
            dependency_count=int(data["dependencyCount"]),
        )


@dataclass(frozen=True)
class QualityScore:
    """npms.io scores, each in [0, 1]."""
    name: str
    final: float
    quality: float
    popularity: float
    maintenance: float

    @classmethod
    def from_json(cls, name: str, data: Mapping[str, Any]) -> "QualityScore":
        score = data["score"]
        detail = score["detail"]
        return cls(
            name=name,
            final=float(score["final"]),
            quality=float(detail["quality"]),
            popularity=float(detail["popularity"]),
            maintenance=float(detail["maintenance"]),
        )


@dataclass(frozen=True)
class ComparisonEntry:
    """One side of a package comparison."""
    name: str
    version: str
    description: Optional[str]
    downloads: int
    maintainers: List[str]
    keywords: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "downloads": self.downloads,
            "maintainers": list(self.maintainers),
            "keywords": list(self.keywords),
        }
