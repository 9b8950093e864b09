"""
HTTP transport for the guild backend.

Provides a thin aiohttp wrapper with:
- A persistent cookie jar holding the ambient (httpOnly) session credential
- Configurable timeouts and concurrency
- Session lifecycle management
- Structured logging for all operations

It deliberately knows nothing about authentication or status semantics; the
request pipeline interprets responses.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import aiohttp

from utils.log_context import get_context_extra
from utils.logging import get_logger

logger = get_logger(__name__)


class TransportError(Exception):
    """Raised when a request produced no HTTP response (timeout, connection failure)."""


@dataclass(frozen=True)
class TransportResponse:
    """Status and raw body text of a completed HTTP exchange."""

    status: int
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HTTPClient:
    """
    Cookie-carrying HTTP client.

    Features:
    - Cookies set by the backend are kept and replayed on every request
    - Bounded per-request timeout and in-flight concurrency
    - Lazily created session, closed cleanly by ``close()``
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15,
        concurrency: int = 8,
        allow_ip_cookies: bool = True,
        user_agent: str | None = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            base_url: Backend root, e.g. "http://localhost:3000".
            timeout: Total request timeout seconds.
            concurrency: Max in-flight requests.
            allow_ip_cookies: Accept cookies from IP-address hosts (local dev servers).
            user_agent: Optional UA string.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._concurrency = concurrency
        self._sem: asyncio.Semaphore | None = None
        self._allow_ip_cookies = allow_ip_cookies
        self._cookie_jar: aiohttp.CookieJar | None = None
        self._session: aiohttp.ClientSession | None = None
        self._user_agent = user_agent or "senadb-guild-client"

        self._request_count = 0
        self._error_count = 0

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._cookie_jar is None:
            self._cookie_jar = aiohttp.CookieJar(unsafe=self._allow_ip_cookies)
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                cookie_jar=self._cookie_jar,
                raise_for_status=False,
            )
        return self._session

    def _get_semaphore(self) -> asyncio.Semaphore:
        if self._sem is None:
            self._sem = asyncio.Semaphore(self._concurrency)
        return self._sem

    async def close(self) -> None:
        """Close the HTTP session cleanly."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP session closed")
        self._session = None

    def clear_cookies(self) -> None:
        """Forget the stored credential (used on logout)."""
        if self._cookie_jar is not None:
            self._cookie_jar.clear()

    def get_health_status(self) -> dict:
        """Return health metrics for observability."""
        return {
            "http_client_status": "ok" if self._session and not self._session.closed else "closed",
            "total_requests": self._request_count,
            "total_errors": self._error_count,
            "cookies": len(self._cookie_jar) if self._cookie_jar is not None else 0,
        }

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
    ) -> TransportResponse:
        """
        Perform one HTTP exchange.

        Args:
            method: HTTP method.
            path: Path relative to the base URL, starting with "/".
            body: JSON-serializable request body, or None for no body.

        Returns:
            TransportResponse with the status and decoded body text.

        Raises:
            TransportError: On timeout or connection-level failure.
        """
        url = f"{self._base_url}{path}"
        method = method.upper()
        self._request_count += 1

        kwargs: dict[str, Any] = {
            "headers": {
                "Content-Type": "application/json",
                "User-Agent": self._user_agent,
            }
        }
        if body is not None:
            kwargs["json"] = body

        async with self._get_semaphore():
            session = await self._get_session()
            logger.debug(f"HTTP {method} {path}", extra=get_context_extra(method, path))
            try:
                async with session.request(method, url, **kwargs) as resp:
                    raw = await resp.read()
                    text = raw.decode("utf-8", errors="replace")
                    logger.debug(
                        f"HTTP {method} {path} -> {resp.status} ({len(raw)} bytes)",
                        extra=get_context_extra(method, path, resp.status),
                    )
                    return TransportResponse(status=resp.status, text=text)
            except asyncio.TimeoutError as e:
                self._error_count += 1
                logger.warning(
                    f"Timeout for {method} {path}", extra=get_context_extra(method, path)
                )
                raise TransportError(f"Timed out: {method} {path}") from e
            except aiohttp.ClientError as e:
                self._error_count += 1
                logger.warning(
                    f"Client error for {method} {path}: {e}",
                    extra=get_context_extra(method, path),
                )
                raise TransportError(f"Connection failed: {method} {path}") from e
