"""Per-scheme pooled HTTP clients shared by all fetch chains."""

from http.cookiejar import DefaultCookiePolicy
from types import TracebackType

import httpx
import structlog

from src.features.fetch.config import FetchConfig


logger = structlog.get_logger()


class ConnectionPools:
    """Keep-alive connection pools, one per scheme.

    Each pool is an ``httpx.AsyncClient`` capped at ``pool_size``
    connections. Clients never follow redirects and never store cookies:
    redirects and cookies belong to the individual chain, and the pools
    are shared by every chain in the process.
    """

    def __init__(
        self,
        config: FetchConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the pools.

        Args:
            config: Fetch configuration providing pool size and timeout.
            transport: Optional transport override (used by tests).
        """
        self._config = config
        self._clients = {
            scheme: self._build_client(config, transport)
            for scheme in ("http", "https")
        }
        self._closed = False

    @staticmethod
    def _build_client(
        config: FetchConfig,
        transport: httpx.AsyncBaseTransport | None,
    ) -> httpx.AsyncClient:
        limits = httpx.Limits(
            max_connections=config.pool_size,
            max_keepalive_connections=config.pool_size,
        )
        client = httpx.AsyncClient(
            limits=limits,
            timeout=httpx.Timeout(config.timeout_seconds),
            follow_redirects=False,
            transport=transport,
        )
        client.cookies.jar.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        return client

    @property
    def closed(self) -> bool:
        """Whether the pools have been closed."""
        return self._closed

    def client_for(self, scheme: str) -> httpx.AsyncClient:
        """Get the pooled client for a scheme.

        Args:
            scheme: ``http`` or ``https``.

        Returns:
            The shared client for that scheme.

        Raises:
            RuntimeError: If the pools are closed.
            KeyError: If the scheme has no pool.
        """
        if self._closed:
            msg = "Connection pools are closed"
            raise RuntimeError(msg)
        return self._clients[scheme]

    async def aclose(self) -> None:
        """Close every pooled connection."""
        if self._closed:
            return
        self._closed = True
        for client in self._clients.values():
            await client.aclose()
        logger.debug("connection_pools_closed", component="fetch")

    async def __aenter__(self) -> "ConnectionPools":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
