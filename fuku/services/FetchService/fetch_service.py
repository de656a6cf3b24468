"""
HTTP downloader for attachment CDN URLs.

Each attempt streams the body so an oversized response is abandoned as soon as
it crosses the ceiling. Failed attempts are retried with a linear backoff; the
last failure is re-raised as-is once the attempts are exhausted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from fuku.services.FetchService.fetch_service_interface import FetchServiceInterface

DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_MAX_BYTES = 50 * 1024 * 1024
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.5


class FetchError(Exception):
    """Raised when an attachment cannot be downloaded."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class ResponseTooLargeError(FetchError):
    def __init__(self, url: str, limit: int) -> None:
        self.limit = limit
        super().__init__(url, f"Response exceeds size limit of {limit} bytes")


class FetchService(FetchServiceInterface):
    """
    Download attachments with bounded retries.

    Configuration:
        timeout: Per-request timeout in seconds (default 20)
        max_bytes: Hard response size ceiling (default 50 MB)
        max_attempts: Total attempts before giving up (default 3)
        backoff: Base delay; attempt ``n`` waits ``n * backoff`` seconds
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_bytes: int = DEFAULT_MAX_BYTES,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: float = DEFAULT_BACKOFF_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.logger = logger or logging.getLogger("FetchService")
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.max_attempts = max(1, max_attempts)
        self.backoff = max(0.0, backoff)
        self._client = http_client
        self._sleep = sleep

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self.logger.warning(
            "Fetch attempt %d/%d failed: %s",
            retry_state.attempt_number,
            self.max_attempts,
            error,
        )

    def _make_retrying(self) -> AsyncRetrying:
        """Retry policy: fixed attempt count, linear backoff, last error re-raised."""
        return AsyncRetrying(
            retry=retry_if_exception_type(FetchError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff, increment=self.backoff),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

    async def fetch(self, url: str) -> bytes:
        data = b""
        async for attempt in self._make_retrying():
            with attempt:
                data = await self._fetch_once(url)
        self.logger.debug("Fetched %d bytes from %s", len(data), url)
        return data

    async def _fetch_once(self, url: str) -> bytes:
        if self._client is not None:
            return await self._download(self._client, url)
        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await self._download(client, url)

    async def _download(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            async with client.stream("GET", url, timeout=self.timeout) as response:
                response.raise_for_status()

                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > self.max_bytes:
                    raise ResponseTooLargeError(url, self.max_bytes)

                buffer = bytearray()
                async for chunk in response.aiter_bytes():
                    buffer.extend(chunk)
                    if len(buffer) > self.max_bytes:
                        raise ResponseTooLargeError(url, self.max_bytes)
                return bytes(buffer)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                url, f"HTTP {e.response.status_code} while fetching attachment"
            ) from e
        except httpx.TimeoutException as e:
            raise FetchError(url, f"Timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"Network error: {e}") from e
