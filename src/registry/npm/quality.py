"""Package quality scores (npms.io)."""

from __future__ import annotations

from typing import Optional

from constants import Constants
from common.http_client import HttpClient
from mcp_schemas import QUALITY_SCORE
from mcp_validate import validate_response

from .client import encode_package_name
from .models import QualityScore


class QualityClient:
    def __init__(self, http: HttpClient, base_url: Optional[str] = None):
        self._http = http
        self._base_url = (base_url or Constants.QUALITY_URL_NPMS).rstrip("/")

    async def get_quality(self, name: str) -> QualityScore:
        url = f"{self._base_url}/{encode_package_name(name)}"
        data = await self._http.get_json(url, context="quality")
        return QualityScore.from_json(name, validate_response(QUALITY_SCORE, data, source="quality"))
