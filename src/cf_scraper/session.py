"""HTTP session lifecycle for the land-registry portal."""
import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp
from asyncio_throttle import Throttler
from pydantic import BaseModel

from .errors import TransportError
from .models import PortalConfig

logger = logging.getLogger(__name__)


class PortalResponse(BaseModel):
    """Status and body of one portal response."""
    method: str
    path: str
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def raise_for_status(self) -> None:
        if not self.ok:
            raise TransportError(f"{self.method} {self.path} returned HTTP {self.status}")


class PortalSession:
    """One cookie-bearing connection context bound to the portal origin.

    Headers are fixed when the session is built; only the cookie jar changes
    afterwards. A session is never reset in place: drop it and build a new one.
    """

    def __init__(self, config: PortalConfig, throttler: Throttler):
        self.config = config
        self.throttler = throttler
        self.user_agent = random.choice(config.user_agents)
        self.headers: Dict[str, str] = {
            "User-Agent": self.user_agent,
            "X-Requested-With": "XMLHttpRequest",
            "Referer": config.referer,
            "Origin": config.base_url,
        }
        # unsafe=True keeps cookies set by IP-addressed hosts
        self.cookie_jar = aiohttp.CookieJar(unsafe=True)
        self._session = aiohttp.ClientSession(
            headers=self.headers,
            cookie_jar=self.cookie_jar,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        )

    @property
    def closed(self) -> bool:
        return self._session.closed

    def url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    async def request(self, method: str, path: str, **kwargs: Any) -> PortalResponse:
        """Perform one request and return its status and body without checking the status."""
        try:
            async with self.throttler:
                async with self._session.request(method, self.url(path), **kwargs) as response:
                    text = await response.text(errors="replace")
                    return PortalResponse(method=method, path=path, status=response.status, text=text)
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {path} timed out after {self.config.timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

    async def get(self, path: str) -> PortalResponse:
        response = await self.request("GET", path)
        response.raise_for_status()
        return response

    async def post_form(self, path: str, body: str) -> PortalResponse:
        return await self.request(
            "POST",
            path,
            data=body,
            headers={"Content-Type": "application/x-www-form-urlencoded; charset=UTF-8"},
        )

    async def close(self) -> None:
        if not self._session.closed:
            await self._session.close()


class SessionManager:
    """Owns the single live PortalSession and hands it out one operation at a time."""

    def __init__(self, config: Optional[PortalConfig] = None):
        self.config = config or PortalConfig()
        self.throttler = Throttler(rate_limit=self.config.requests_per_second)
        self.sessions_created = 0
        self._session: Optional[PortalSession] = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Optional[PortalSession]:
        return self._session

    def _current(self) -> PortalSession:
        if self._session is None or self._session.closed:
            self._session = PortalSession(self.config, self.throttler)
            self.sessions_created += 1
            logger.debug(f"Created portal session #{self.sessions_created} ({self._session.user_agent})")
        return self._session

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[PortalSession]:
        """Exclusive use of the live session for one token-then-act sequence."""
        async with self._lock:
            yield self._current()

    async def invalidate(self) -> None:
        """Close and drop the live session. Only call while holding a lease."""
        session, self._session = self._session, None
        if session is not None:
            await session.close()
            logger.debug("Portal session invalidated")

    async def close(self) -> None:
        async with self._lock:
            await self.invalidate()
