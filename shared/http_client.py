"""
HTTP client utilities for calls to external generation providers.
"""

import asyncio
from typing import Any

import aiohttp


class HTTPStatusError(Exception):
    """Raised when a provider answers with a non-success status code."""

    def __init__(self, status: int, body: str, url: str | None = None) -> None:
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status}: {body}")


class AsyncHTTPClient:
    """Async HTTP client for provider communication."""

    def __init__(self, timeout: int = 30) -> None:
        """Initialize HTTP client."""
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self.session:
            await self.session.close()
            self.session = None

    @staticmethod
    async def _prepare_request(coro_or_ctx: Any) -> Any:
        """Normalize aiohttp request result to an async context manager."""
        if asyncio.iscoroutine(coro_or_ctx):
            return await coro_or_ctx
        return coro_or_ctx

    @staticmethod
    async def _ensure_response_ok(response: Any, url: str) -> None:
        """Raise HTTPStatusError with the raw body for non-2xx responses."""
        if response.status >= 400:
            body = await response.text()
            raise HTTPStatusError(response.status, body, url=url)

    def _require_session(self) -> aiohttp.ClientSession:
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")
        return self.session

    async def get(self, url: str, headers: dict[str, Any] | None = None) -> dict[str, Any]:
        """Perform GET request."""
        session = self._require_session()

        request_ctx = await self._prepare_request(session.get(url, headers=headers))
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.json(content_type=None)

    async def post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform POST request with a JSON body."""
        session = self._require_session()

        request_ctx = await self._prepare_request(
            session.post(url, json=data, headers=headers)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.json(content_type=None)

    async def post_form(
        self,
        url: str,
        form: aiohttp.FormData,
        headers: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform POST request with a multipart form body."""
        session = self._require_session()

        request_ctx = await self._prepare_request(
            session.post(url, data=form, headers=headers)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.json(content_type=None)

    async def get_bytes(
        self,
        url: str,
        headers: dict[str, Any] | None = None,
    ) -> tuple[bytes, str | None]:
        """Perform GET request and return the raw body with its content type."""
        session = self._require_session()

        request_ctx = await self._prepare_request(session.get(url, headers=headers))
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.read(), response.headers.get("Content-Type")
