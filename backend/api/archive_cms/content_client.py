"""
HTTP client for the external Article and Photograph APIs.

Used endpoints (all answer with the {success, data|error} envelope):
- GET    /api/articles          -> {"success": true, "data": [...]}
- DELETE /api/articles/{id}     -> {"success": true, "message": "..."}
- GET    /api/photographs       -> {"success": true, "data": [...]}
- DELETE /api/photographs/{id}  -> {"success": true, "message": "..."}
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import quote

import httpx

from archive_cms.content import api_path
from archive_cms.db import load_env_once

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_S = 10.0


# Transport and parse failures, kept separate from "the API said no".
class ContentApiError(RuntimeError):
    pass


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise ContentApiError("CONTENT_API_BASE_URL is empty.")
    return base_url.rstrip("/")


class ContentApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = _normalize_base_url(base_url)
        self.timeout_s = timeout_s
        # Tests swap in httpx.MockTransport here.
        self._transport = transport

    @classmethod
    def from_env(cls) -> "ContentApiClient":
        load_env_once()
        return cls(
            os.environ.get("CONTENT_API_BASE_URL", DEFAULT_BASE_URL),
            timeout_s=_env_float("CONTENT_API_TIMEOUT_S", DEFAULT_TIMEOUT_S),
        )

    def _client(self, access_token: str | None = None) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            headers=headers,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, access_token: str | None = None) -> tuple[int, dict[str, Any]]:
        try:
            async with self._client(access_token) as client:
                resp = await client.request(method, path)
        except httpx.HTTPError as e:
            raise ContentApiError(f"{method} {path} failed: {e.__class__.__name__}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            # Avoid dumping huge bodies; include a small snippet.
            body = resp.text[:200]
            raise ContentApiError(f"{method} {path} returned non-JSON ({resp.status_code}): {body}") from e

        if not isinstance(data, dict):
            raise ContentApiError(f"{method} {path} returned a non-object body ({resp.status_code}).")
        return resp.status_code, data

    async def list_records(self, kind: str) -> dict[str, Any]:
        """
        Returns the raw envelope. A 2xx reply whose envelope is not a success,
        or a non-2xx reply, is reported as {"success": false, ...} rather than
        raised.
        """
        status, data = await self._request("GET", api_path(kind))
        if status >= 400:
            return {"success": False, "error": data.get("error") or f"HTTP {status}"}
        if data.get("success") and not isinstance(data.get("data"), list):
            raise ContentApiError(f"GET {api_path(kind)} returned success without a data list.")
        return data

    async def delete_record(self, kind: str, record_id: str, *, access_token: str | None = None) -> dict[str, Any]:
        path = f"{api_path(kind)}/{quote(str(record_id), safe='')}"
        status, data = await self._request("DELETE", path, access_token)
        if status >= 400:
            return {"success": False, "error": data.get("error") or f"HTTP {status}"}
        return data
