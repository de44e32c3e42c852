"""Download counts from the npm downloads API."""

from __future__ import annotations

from typing import Optional

from constants import Constants
from common.errors import SchemaValidationError
from common.http_client import HttpClient
from mcp_schemas import DOWNLOAD_POINT
from mcp_validate import validate_response

from .client import encode_package_name
from .models import DownloadPoint


class DownloadsClient:
    """Point download counts for one package over a fixed period."""

    def __init__(self, http: HttpClient, base_url: Optional[str] = None):
        self._http = http
        self._base_url = (base_url or Constants.DOWNLOADS_URL_NPM).rstrip("/")

    async def get_downloads(
        self, name: str, period: str = Constants.DEFAULT_DOWNLOAD_PERIOD
    ) -> DownloadPoint:
        """Fetch the download count of ``name`` for ``period``.

        Raises:
            SchemaValidationError: ``period`` is not one of the fixed periods (no
                request is issued) or the response has the wrong shape.
        """
        if period not in Constants.DOWNLOAD_PERIODS:
            raise SchemaValidationError(
                f"Invalid period '{period}': expected one of {', '.join(Constants.DOWNLOAD_PERIODS)}",
                path="period",
            )
        url = f"{self._base_url}/{period}/{encode_package_name(name)}"
        data = await self._http.get_json(url, context="downloads")
        return DownloadPoint.from_json(
            validate_response(DOWNLOAD_POINT, data, source="download stats"), period
        )
