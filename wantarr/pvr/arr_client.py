"""Shared HTTP plumbing for *arr style PVR APIs."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp
from yarl import URL

from wantarr.__version__ import __version__
from wantarr.config import PvrConfig
from wantarr.errors import BackendResponseError, BackendUnreachableError
from wantarr.logger import WantarrLogger

DEFAULT_USER_AGENT = f"Wantarr/{__version__}"
DEFAULT_API_PATH = "api/v3"
DEFAULT_TIMEOUT_SECONDS = 15


def resolve_api_url(root_url: str, api_path: str = DEFAULT_API_PATH) -> URL:
    """API base for a configured root; roots that already point at ``/api`` are kept."""
    root = URL(root_url.strip().rstrip("/"))
    if "/api" in root.path:
        return root
    return root / api_path


class ArrServiceAdapter:
    """Single-shot JSON GETs against one PVR instance, no retries."""

    def __init__(
        self,
        pvr: PvrConfig,
        log: Optional[WantarrLogger] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        api_path: str = DEFAULT_API_PATH,
    ):
        if not pvr.api_key:
            raise ValueError(f"API key is required for pvr '{pvr.name}'.")

        self.pvr = pvr
        self.name = pvr.name
        self.log = log or WantarrLogger(name=pvr.name)
        self.timeout = timeout
        self.api_url = resolve_api_url(pvr.url, api_path)
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        context: str,
    ) -> Any:
        url = self.api_url / path
        self.log.api_request("GET", str(url), params)
        session = await self._ensure_session()
        request_start = time.monotonic()

        try:
            async with session.get(url, params=params) as response:
                elapsed_ms = (time.monotonic() - request_start) * 1000
                self.log.api_response(response.status, elapsed_ms)
                if response.status != 200:
                    raise BackendResponseError(
                        f"failed retrieving valid {context} api response from {self.name}: "
                        f"{response.status} {response.reason}",
                        status=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as exc:
                    raise BackendResponseError(
                        f"failed decoding {context} api response from {self.name}: {exc}",
                        status=response.status,
                    ) from exc
        except (asyncio.TimeoutError, aiohttp.ClientError) as exc:
            raise BackendUnreachableError(
                f"failed retrieving {context} api response from {self.name}: "
                f"{type(exc).__name__}: {exc}"
            ) from exc

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                self._session = aiohttp.ClientSession(
                    headers=self._get_headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    def _get_headers(self) -> Dict[str, str]:
        return {"X-Api-Key": self.pvr.api_key, "User-Agent": DEFAULT_USER_AGENT}

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False
