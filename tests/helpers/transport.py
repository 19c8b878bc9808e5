"""Scripted httpx transport for fetch chain tests.

Routes map absolute URLs to response factories. Every request is
recorded so tests can assert on outgoing headers and hop counts.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx

from src.features.fetch.client import UrlFetcher
from src.features.fetch.config import FetchConfig
from src.features.fetch.pools import ConnectionPools


ResponseFactory = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


class CountingStream(httpx.AsyncByteStream):
    """Async body stream that records how far it was consumed."""

    def __init__(self, chunk: bytes, count: int) -> None:
        self._chunk = chunk
        self._count = count
        self.produced = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for _ in range(self._count):
            if self.closed:
                return
            self.produced += 1
            yield self._chunk

    async def aclose(self) -> None:
        self.closed = True


class ScriptedTransport:
    """Mock transport answering from a URL -> factory table.

    Unknown URLs get a 404.
    """

    def __init__(self, routes: dict[str, ResponseFactory] | None = None) -> None:
        self.routes: dict[str, ResponseFactory] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def add(self, url: str, factory: ResponseFactory) -> None:
        """Register a route."""
        self.routes[url] = factory

    def redirect(
        self,
        url: str,
        location: str | bytes | None,
        status: int = 302,
        set_cookies: list[str | bytes] | None = None,
    ) -> None:
        """Register a redirect response.

        Bytes values are sent as raw header bytes.
        """
        headers: list[tuple[str, str | bytes]] = []
        if location is not None:
            headers.append(("location", location))
        for cookie in set_cookies or []:
            headers.append(("set-cookie", cookie))
        self.add(url, lambda _request: httpx.Response(status, headers=headers))

    def page(
        self,
        url: str,
        body: bytes | str,
        headers: dict[str, str] | None = None,
        status: int = 200,
    ) -> None:
        """Register a page response.

        The body is passed as a stream so the fetcher reads raw bytes, as
        it would from a socket.
        """
        content = body.encode("utf-8") if isinstance(body, str) else body
        self.add(
            url,
            lambda _request: httpx.Response(
                status, headers=headers or {}, stream=httpx.ByteStream(content)
            ),
        )

    def handler(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        factory = self.routes.get(str(request.url))
        if factory is None:
            return httpx.Response(404)
        return factory(request)

    def mock(self) -> httpx.MockTransport:
        """Build the httpx transport."""
        return httpx.MockTransport(self.handler)

    def urls(self) -> list[str]:
        """URLs requested so far, in order."""
        return [str(request.url) for request in self.requests]


@asynccontextmanager
async def fetcher_for(
    transport: ScriptedTransport,
    **config_overrides: Any,
) -> AsyncIterator[UrlFetcher]:
    """Yield a fetcher whose pools are backed by ``transport``."""
    config = FetchConfig(**config_overrides)
    async with ConnectionPools(config, transport=transport.mock()) as pools:
        yield UrlFetcher(pools, config)
