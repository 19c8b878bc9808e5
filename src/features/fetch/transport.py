"""Transport client: one GET per hop through the shared connection pools."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog

from src.features.fetch.config import FetchConfig
from src.features.fetch.models import FetchAbortedError, FetchErrorClass
from src.features.fetch.pools import ConnectionPools
from src.features.fetch.redact import redact_headers, redact_url_credentials
from src.features.fetch.session import SessionState


logger = structlog.get_logger()


class TransportClient:
    """Issues single hops with browser-like headers and a hard timeout.

    The timeout covers the whole hop: connection, headers and body. When it
    fires the in-flight response is closed and TIMEOUT is raised.
    """

    def __init__(self, pools: ConnectionPools, config: FetchConfig) -> None:
        """Initialize the transport client.

        Args:
            pools: Shared per-scheme connection pools.
            config: Fetch configuration.
        """
        self._pools = pools
        self._config = config

    def build_headers(self, session: SessionState) -> dict[str, str | bytes]:
        """Build request headers for the next hop.

        Args:
            session: Chain session providing Referer and Cookie.

        Returns:
            Complete headers dictionary.
        """
        headers: dict[str, str | bytes] = dict(self._config.base_headers())
        headers.update(session.request_headers())
        return headers

    @asynccontextmanager
    async def open(
        self,
        url: str,
        scheme: str,
        session: SessionState,
        log: structlog.stdlib.BoundLogger,
    ) -> AsyncIterator[httpx.Response]:
        """Send a GET and yield the streaming response.

        The body is left unread. Errors raised while the caller reads it
        are mapped the same way as errors raised while connecting.

        Args:
            url: Absolute URL of the hop.
            scheme: Validated scheme selecting the pool.
            session: Chain session.
            log: Chain-bound logger.

        Yields:
            The response with headers received and body pending.

        Raises:
            FetchAbortedError: TIMEOUT or TRANSPORT_ERROR.
        """
        headers = self.build_headers(session)
        client = self._pools.client_for(scheme)
        log.debug(
            "hop_request",
            url=redact_url_credentials(url),
            headers=redact_headers(headers),
        )

        try:
            async with asyncio.timeout(self._config.timeout_seconds):
                response = await self._send(client, url, headers)
                try:
                    yield response
                finally:
                    await response.aclose()
        except TimeoutError as e:
            raise FetchAbortedError.build(
                FetchErrorClass.TIMEOUT,
                f"Request timed out after {self._config.timeout_seconds}s",
                url=url,
            ) from e
        except httpx.TimeoutException as e:
            raise FetchAbortedError.build(
                FetchErrorClass.TIMEOUT,
                f"Request timed out: {e}",
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise FetchAbortedError.build(
                FetchErrorClass.TRANSPORT_ERROR,
                f"Transport failure ({type(e).__name__}): {e}",
                url=url,
            ) from e

    async def _send(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: dict[str, str | bytes],
    ) -> httpx.Response:
        """Build and send the GET, keeping the body unread.

        Raises:
            FetchAbortedError: TRANSPORT_ERROR if the request cannot be
                encoded (invalid URL or header value).
        """
        try:
            request = client.build_request("GET", url, headers=headers)
            return await client.send(request, stream=True)
        except (httpx.InvalidURL, ValueError) as e:
            raise FetchAbortedError.build(
                FetchErrorClass.TRANSPORT_ERROR,
                f"Request could not be sent ({type(e).__name__}): {e}",
                url=url,
            ) from e
