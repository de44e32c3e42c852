"""Shared async HTTP client used by every downstream service client.

Encapsulates the session lifecycle, timeout, retry and status handling so the
registry and repository modules only deal with URLs and decoded payloads.
Transport failures and 5xx responses are retried with exponential backoff;
4xx responses are returned (or raised) immediately.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from constants import Constants
from common.errors import NetworkError, SchemaValidationError, UpstreamHTTPError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

USER_AGENT = f"{Constants.SERVER_NAME}/1.0"


@dataclass(frozen=True)
class HttpResponse:
    """Fully read response; the underlying connection is already released."""

    status: int
    reason: str
    text: str
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """aiohttp-backed GET client with its own connection pool."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        retry_max: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize the client.

        Args:
            timeout: Total per-request timeout in seconds.
            retry_max: Attempts per request for retryable failures.
            retry_base_delay: First backoff delay in seconds; doubles per attempt.
            headers: Extra default headers.
        """
        self._timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else Constants.REQUEST_TIMEOUT
        )
        self._retry_max = max(1, retry_max if retry_max is not None else Constants.HTTP_RETRY_MAX)
        self._retry_base_delay = (
            retry_base_delay if retry_base_delay is not None else Constants.HTTP_RETRY_BASE_DELAY_SEC
        )
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json, text/plain, */*"}
        if headers:
            self._headers.update(headers)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> aiohttp.ClientSession:
        """Start the HTTP session if needed and return it."""
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=20)
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=connector,
                headers=self._headers,
            )
        return self._session

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def _fetch_once(self, url: str) -> HttpResponse:
        session = await self.start()
        async with session.get(url) as response:
            text = await response.text()
            return HttpResponse(
                status=response.status,
                reason=response.reason or "",
                text=text,
                url=url,
            )

    async def get(self, url: str, *, context: str) -> HttpResponse:
        """GET ``url`` with timeout and retries.

        Args:
            url: Fully built target URL.
            context: Short source tag for logs (e.g., "registry", "readme").

        Returns:
            HttpResponse: The final response, whatever its status.

        Raises:
            NetworkError: Every attempt failed at the transport level.
        """
        target = safe_url(url)
        last_error: Optional[str] = None
        response: Optional[HttpResponse] = None

        for attempt in range(self._retry_max):
            if attempt:
                await asyncio.sleep(self._retry_base_delay * (2 ** (attempt - 1)))
            with Timer() as t:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=target,
                            context=context,
                            attempt=attempt + 1,
                        ),
                    )
                try:
                    response = await self._fetch_once(url)
                except asyncio.TimeoutError:
                    last_error = f"timed out after {self._timeout.total} seconds"
                    logger.debug("%s request to %s timed out", context, target)
                    continue
                except aiohttp.ClientError as exc:
                    last_error = str(exc) or exc.__class__.__name__
                    logger.debug("%s connection error for %s: %s", context, target, last_error)
                    continue

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        status_code=response.status,
                        duration_ms=t.duration_ms(),
                        target=target,
                        context=context,
                    ),
                )
            if response.status < 500:
                return response
            last_error = f"{response.reason} (HTTP {response.status})"

        if response is not None:
            # Retries exhausted on server errors; surface the last answer.
            return response
        logger.warning(
            "%s request failed after %d attempts: %s",
            context,
            self._retry_max,
            last_error,
            extra=extra_context(event="http_exception", component="http_client", target=target),
        )
        raise NetworkError(
            f"{context} request failed after {self._retry_max} attempts: {last_error}"
        )

    async def get_text(self, url: str, *, context: str) -> str:
        """GET ``url`` and return the body; non-2xx raises UpstreamHTTPError."""
        response = await self.get(url, context=context)
        if not response.ok:
            logger.warning(
                "HTTP non-2xx handled",
                extra=extra_context(
                    event="http_response",
                    outcome="handled_non_2xx",
                    status_code=response.status,
                    target=safe_url(url),
                    context=context,
                ),
            )
            raise UpstreamHTTPError(response.status, response.reason, url)
        return response.text

    async def get_json(self, url: str, *, context: str) -> Any:
        """GET ``url`` and decode JSON; undecodable bodies raise SchemaValidationError."""
        text = await self.get_text(url, context=context)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SchemaValidationError(
                f"{context} response is not valid JSON: {exc.msg}"
            ) from exc
