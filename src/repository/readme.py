"""README discovery across branch-naming conventions.

Candidates are tried strictly in order: ``refs/heads/main``, ``refs/heads/master``
and finally the branch-less path, which relies on the raw-content host
resolving the repository's default branch. The first 2xx wins and nothing is
merged across candidates.
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import Iterable, List, Optional, Tuple

from constants import Constants
from common.errors import NetworkError, ResourceNotFoundError, SchemaValidationError, UpstreamHTTPError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)

README_NOT_FOUND = "README not found in main, master, or default branch."


def normalize_repository_url(url: str) -> str:
    """Drop the ``git+`` transport prefix npm commonly reports."""
    url = url.strip()
    if url.startswith("git+"):
        url = url[len("git+"):]
    return url


def repository_path(url: str) -> str:
    """Return ``owner/repo`` for a repository URL.

    Examples:
        ``git+https://github.com/acme/pkg.git`` -> ``acme/pkg``
        ``github:acme/pkg`` -> ``acme/pkg``
    """
    parsed = urllib.parse.urlparse(normalize_repository_url(url))
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) >= 2 and parts[1].endswith(".git"):
        parts[1] = parts[1][: -len(".git")]
    if len(parts) < 2 or not parts[1]:
        raise SchemaValidationError(f"Repository URL '{url}' has no owner/repo path", path="repository/url")
    return f"{parts[0]}/{parts[1]}"


class ReadmeResolver:
    """Fetch README.md from the raw-content host for a repository URL."""

    def __init__(
        self,
        http: HttpClient,
        raw_base: Optional[str] = None,
        branches: Iterable[str] = Constants.README_BRANCHES,
    ):
        self._http = http
        self._raw_base = (raw_base or Constants.RAW_CONTENT_BASE).rstrip("/")
        self._branches = tuple(branches)

    def candidate_urls(self, repo_path: str) -> List[Tuple[str, str]]:
        """Ordered (label, url) pairs; the branch-less default comes last."""
        candidates = [
            (branch, f"{self._raw_base}/{repo_path}/refs/heads/{branch}/{Constants.README_FILE}")
            for branch in self._branches
        ]
        candidates.append(("default", f"{self._raw_base}/{repo_path}/{Constants.README_FILE}"))
        return candidates

    async def resolve(self, repository_url: str) -> str:
        """Return the README text of the first candidate answering 2xx.

        Raises:
            SchemaValidationError: ``repository_url`` has no owner/repo path.
            ResourceNotFoundError: No candidate served the README.
        """
        repo_path = repository_path(repository_url)
        for label, url in self.candidate_urls(repo_path):
            try:
                text = await self._http.get_text(url, context="readme")
            except (UpstreamHTTPError, NetworkError) as exc:
                if is_debug_enabled(logger):
                    logger.debug(
                        "README candidate failed",
                        extra=extra_context(
                            event="decision",
                            component="readme",
                            action="resolve",
                            outcome="fallback",
                            branch=label,
                            target=safe_url(url),
                            error=str(exc),
                        ),
                    )
                continue
            logger.debug("README for %s served from %s", repo_path, label)
            return text
        raise ResourceNotFoundError(README_NOT_FOUND)
