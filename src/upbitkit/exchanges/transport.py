"""aiohttp-backed HTTP transport with proxy support and request spacing."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Mapping

import aiohttp

from .errors import MalformedResponse, RequestTimeout, TransportError
from .protocol import TransportResponse

logger = logging.getLogger(__name__)


class ProxyConfig:
    """HTTP proxy configuration."""

    def __init__(self, url: str | None = None, username: str | None = None, password: str | None = None):
        self.url = url
        self.username = username
        self.password = password

    @property
    def proxy_url(self) -> str | None:
        if not self.url:
            return None
        if self.username and self.password:
            protocol = self.url.split("://")[0] if "://" in self.url else "http"
            rest = self.url.split("://")[1] if "://" in self.url else self.url
            return f"{protocol}://{self.username}:{self.password}@{rest}"
        return self.url


class Throttle:
    """Keeps at least ``interval_ms`` between consecutive dispatches."""

    def __init__(self, interval_ms: int = 500):
        self.interval = interval_ms / 1000
        self._last = 0.0
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        if self.interval <= 0:
            return
        async with self._lock:
            delay = self._last + self.interval - time.monotonic()
            if delay > 0:
                await asyncio.sleep(delay)
            self._last = time.monotonic()


class AiohttpTransport:
    """Performs requests over a lazily created ``aiohttp.ClientSession``."""

    def __init__(
        self,
        *,
        proxy: ProxyConfig | None = None,
        timeout_s: float = 10.0,
        throttle: Throttle | None = None,
    ):
        self.proxy = proxy or ProxyConfig()
        self.timeout_s = timeout_s
        self.throttle = throttle
        self.session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            connector = aiohttp.TCPConnector()
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            self.session = aiohttp.ClientSession(connector=connector, timeout=timeout)
        return self.session

    async def perform(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: str | None,
    ) -> TransportResponse:
        session = await self._ensure_session()
        if self.throttle is not None:
            await self.throttle.wait()

        try:
            async with session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                proxy=self.proxy.proxy_url,
            ) as resp:
                try:
                    text = await resp.text()
                except UnicodeDecodeError as e:
                    raise MalformedResponse(
                        f"upbit {method} {url} returned a body that is not valid {resp.charset or 'utf-8'}: {e.reason}"
                    ) from e
                return TransportResponse(resp.status, dict(resp.headers), text)
        except asyncio.TimeoutError as e:
            raise RequestTimeout(f"upbit {method} {url} timed out after {self.timeout_s}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"upbit {method} {url} failed: {e}") from e

    async def close(self) -> None:
        """Close connections."""
        if self.session:
            await self.session.close()
            self.session = None
