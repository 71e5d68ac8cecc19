"""
Async HTTP access to the npm registry.

:class:`HTTPClient` wraps one ``httpx.AsyncClient`` for a whole run. It caps
concurrent requests, retries transient failures with exponential backoff,
waits out ``429`` responses, and turns everything else into the tool's own
exceptions.
"""

from __future__ import annotations

import httpx
import random
import asyncio
from typing import Any, Optional

from react_compat.utils.logger import get_logger
from react_compat.__version__ import __version__
from react_compat.exceptions import NetworkError, PackageNotFoundError
from react_compat.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

_MAX_BACKOFF_SECONDS = 8


class HTTPClient:
    """Registry HTTP client.

    Args:
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts after a timeout, transport error or 5xx.
        user_agent: ``User-Agent`` header; defaults to
            ``react-compat-check/<version>``.
        max_concurrency: Requests allowed in flight at once.

    Example:
        >>> async with HTTPClient(max_concurrency=4) as client:
        ...     response = await client.get("https://registry.npmjs.org/react")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrency)
        # 429 waits do not count against max_retries
        self._max_429_retries: int = 5

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET ``url`` with retries.

        Raises:
            PackageNotFoundError: The server answered 404.
            NetworkError: Any other 4xx, too many 429s, or every attempt
                failed.
        """
        return await self._request("GET", url, **kwargs)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._ensure_client()
        target = url.strip().strip("\"'")

        failures = 0
        throttled = 0
        last_error: Optional[Exception] = None

        while True:
            try:
                async with self._semaphore:
                    response = await client.request(method, target, **kwargs)
            except httpx.TransportError as exc:
                # Includes timeouts
                last_error = exc
                logger.warning(
                    "Request to %s failed (%d/%d): %s",
                    target,
                    failures + 1,
                    self.max_retries + 1,
                    exc,
                )
            else:
                status = response.status_code

                if status == 429:
                    throttled += 1
                    if throttled > self._max_429_retries:
                        raise NetworkError(
                            f"Rate limit exceeded after {self._max_429_retries} retries",
                            url=target,
                            status_code=429,
                        )
                    wait = _retry_after_seconds(response)
                    logger.warning("Rate limited by %s, waiting %ds", target, wait)
                    await asyncio.sleep(wait)
                    continue

                if status == 404:
                    raise PackageNotFoundError(
                        f"Resource not found: {target}",
                        url=target,
                        status_code=404,
                    )

                if 400 <= status < 500:
                    raise NetworkError(
                        f"HTTP {status} error for {target}",
                        url=target,
                        status_code=status,
                        response_body=response.text,
                    )

                if status < 500:
                    return response

                last_error = None
                logger.warning(
                    "HTTP %d from %s (%d/%d)",
                    status,
                    target,
                    failures + 1,
                    self.max_retries + 1,
                )

            failures += 1
            if failures > self.max_retries:
                break

            delay = _backoff_delay(failures)
            logger.debug("Retrying %s in %.2fs", target, delay)
            await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {failures} attempts: {target}",
            url=target,
        ) from last_error


def _backoff_delay(failures: int) -> float:
    """Exponential backoff with a little jitter: ~1s, ~2s, ~4s, capped."""
    return min(2 ** (failures - 1), _MAX_BACKOFF_SECONDS) + random.uniform(0.0, 0.3)


def _retry_after_seconds(response: httpx.Response) -> int:
    """Read ``Retry-After`` as whole seconds, defaulting to 1."""
    raw = response.headers.get("Retry-After", "1")
    try:
        return max(0, int(raw))
    except (TypeError, ValueError):
        # HTTP-date form
        return 1
