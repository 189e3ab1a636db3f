from __future__ import annotations

import asyncio
import json
import logging
from time import monotonic
from typing import Any

import aiohttp

from cyfra_client.backend.base import BackendBase, BackendResponse
from cyfra_client.errors import TransportError


logger = logging.getLogger("cyfra.backend")


class HttpBackend(BackendBase):
    """aiohttp transport for the catalog and analysis endpoints."""

    def __init__(
        self,
        *,
        base_url: str = "http://127.0.0.1:5000",
        timeout_seconds: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._owns_session = session is None
        self._closed = False

    async def __aenter__(self) -> "HttpBackend":
        self._closed = False
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        self._closed = True
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise TransportError("backend is closed")
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> BackendResponse:
        session = self._ensure_session()
        url = f"{self.base_url}{path}"
        started = monotonic()
        try:
            async with session.request(method, url, params=params or None, json=body) as response:
                status = int(response.status)
                try:
                    payload = await response.json(content_type=None)
                except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                    return BackendResponse(
                        status=status,
                        decode_error=f"Invalid JSON from {path}: {exc}",
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("backend_unreachable method=%s path=%s error=%s", method, path, exc)
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        finally:
            logger.debug(
                "backend_request method=%s path=%s duration_s=%.4f",
                method,
                path,
                max(0.0, monotonic() - started),
            )
        return BackendResponse(status=status, payload=payload)

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self._request("GET", path, params=params)
        if not response.ok:
            raise TransportError(f"GET {path} returned HTTP {response.status}", status=response.status)
        return response.require_payload()

    async def list_regions(self) -> Any:
        return await self._get_json("/api/regions")

    async def list_categories(self) -> Any:
        return await self._get_json("/api/categories")

    async def list_countries(self) -> Any:
        return await self._get_json("/api/countries")

    async def list_tiles(self, params: dict[str, str]) -> Any:
        return await self._get_json("/api/tiles", params)

    async def available_dates(self, tile_id: str) -> Any:
        # The endpoint reports failures as {"error": ...}, whatever the status.
        response = await self._request("GET", "/api/available-dates", params={"tile": tile_id})
        return response.require_payload()

    async def analyze(self, payload: dict[str, Any]) -> BackendResponse:
        return await self._request("POST", "/api/analyze", body=payload)

    async def analyze_synthetic(self, payload: dict[str, Any]) -> BackendResponse:
        return await self._request("POST", "/api/analyze-synthetic", body=payload)
