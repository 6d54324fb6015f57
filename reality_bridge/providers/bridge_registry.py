"""Loader for the bridge registry feed (JSON list of bridge rows)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings


logger = logging.getLogger(__name__)


class BridgeRegistryError(RuntimeError):
    """The bridge feed could not be loaded or is malformed."""


class BridgeRegistryProvider:
    """Fetches bridge rows from a URL or a local JSON file.

    The feed is either a bare JSON list of rows or an object with a
    ``bridges`` list, each row keyed by the feed's column names
    ("Home Chain", "Home Proxy", ...).
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        path: Optional[Path] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url if url is not None else settings.bridge_registry_url
        self.path = path if path is not None else settings.bridge_registry_path
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "RealityBridgeClient/0.1",
        }

    async def fetch_rows(self) -> List[Dict[str, Any]]:
        if self.path:
            payload = self._read_file(Path(self.path))
        elif self.url:
            payload = await self._fetch_url(self.url)
        else:
            logger.warning("No bridge registry configured; bridge lookups will find nothing")
            return []
        rows = self._extract_rows(payload)
        logger.info("Bridge registry loaded: %d rows", len(rows))
        return rows

    async def _fetch_url(self, url: str) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            try:
                response = await client.get(url, headers=self._headers())
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise BridgeRegistryError(f"Failed to fetch bridge registry from {url}: {exc}") from exc
            try:
                return response.json()
            except ValueError as exc:
                raise BridgeRegistryError(f"Bridge registry at {url} is not valid JSON") from exc

    @staticmethod
    def _read_file(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise BridgeRegistryError(f"Failed to read bridge registry from {path}: {exc}") from exc

    @staticmethod
    def _extract_rows(payload: Any) -> List[Dict[str, Any]]:
        if isinstance(payload, dict):
            payload = payload.get("bridges", [])
        if not isinstance(payload, list):
            raise BridgeRegistryError("Bridge registry must be a list of rows")
        return [row for row in payload if isinstance(row, dict)]
