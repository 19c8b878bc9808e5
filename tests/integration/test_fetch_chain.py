"""Integration tests for fetch chains against a local HTTP server."""

import gzip
import threading
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from src.features.fetch.client import UrlFetcher
from src.features.fetch.config import FetchConfig
from src.features.fetch.metrics import FetchMetrics
from src.features.fetch.models import FetchErrorClass, FetchOutcome
from src.features.fetch.pools import ConnectionPools


def get_server_url(server: ThreadingHTTPServer, path: str) -> str:
    """Get the URL for a path on the test server."""
    host, port = server.server_address[0], server.server_address[1]
    if isinstance(host, bytes):
        host = host.decode("utf-8")
    return f"http://{host}:{port}{path}"


class ChainHandler(BaseHTTPRequestHandler):
    """Serves a small site of redirects, refreshes and encoded pages."""

    # Cookie header seen per path
    seen_cookies: dict[str, str | None] = {}

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def do_GET(self) -> None:  # noqa: N802
        """Route GET requests by path."""
        ChainHandler.seen_cookies[self.path] = self.headers.get("Cookie")

        if self.path == "/login":
            self._redirect("/step", "session=abc; Path=/")
        elif self.path == "/step":
            self._redirect("/refresh", "theme=dark")
        elif self.path == "/refresh":
            self._send(b'<meta http-equiv="refresh" content="0; url=/article">')
        elif self.path == "/article":
            body = "<h1>Café</h1>".encode("iso-8859-1")
            self._send(gzip.compress(body), charset="iso-8859-1", encoding="gzip")
        elif self.path == "/huge":
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.end_headers()
            for _ in range(64):
                self.wfile.write(b"z" * 16384)
        elif self.path == "/error":
            self.send_response(500)
            self.send_header("Content-Length", "0")
            self.end_headers()
        else:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()

    def _redirect(self, location: str, cookie: str) -> None:
        self.send_response(302)
        self.send_header("Location", location)
        self.send_header("Set-Cookie", cookie)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _send(
        self,
        body: bytes,
        charset: str | None = None,
        encoding: str | None = None,
    ) -> None:
        content_type = "text/html"
        if charset:
            content_type += f"; charset={charset}"
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        if encoding:
            self.send_header("Content-Encoding", encoding)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


@pytest.fixture
def chain_server() -> Generator[ThreadingHTTPServer]:
    """Start the local site."""
    ChainHandler.seen_cookies = {}
    server = ThreadingHTTPServer(("127.0.0.1", 0), ChainHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


async def _fetch(url: str, **overrides: int | float) -> FetchOutcome:
    config = FetchConfig(**overrides)
    async with ConnectionPools(config) as pools:
        return await UrlFetcher(pools, config).fetch(url)


class TestFetchChain:
    """End-to-end chains over real sockets."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_redirects_cookies_refresh_and_gzip(
        self, chain_server: ThreadingHTTPServer
    ) -> None:
        """A full chain decodes the final gzip Latin-1 page."""
        FetchMetrics.reset()

        outcome = await _fetch(get_server_url(chain_server, "/login"))

        assert outcome.text == "<h1>Café</h1>"
        assert outcome.charset == "iso-8859-1"
        assert outcome.redirect_count == 3
        assert outcome.final_url == get_server_url(chain_server, "/article")
        assert ChainHandler.seen_cookies == {
            "/login": None,
            "/step": "session=abc",
            "/refresh": "session=abc; theme=dark",
            "/article": "session=abc; theme=dark",
        }
        metrics = FetchMetrics.get_instance()
        assert metrics.redirects_total == 2
        assert metrics.meta_refresh_total == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_payload_ceiling(self, chain_server: ThreadingHTTPServer) -> None:
        """A chunked body beyond the ceiling is abandoned."""
        outcome = await _fetch(
            get_server_url(chain_server, "/huge"), max_bytes=64 * 1024
        )

        assert outcome.error is not None
        assert outcome.error.error_class == FetchErrorClass.PAYLOAD_TOO_LARGE

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upstream_error(self, chain_server: ThreadingHTTPServer) -> None:
        """Server errors are reported with their status."""
        outcome = await _fetch(get_server_url(chain_server, "/error"))

        assert outcome.error is not None
        assert outcome.error.error_class == FetchErrorClass.UPSTREAM_STATUS
        assert outcome.error.status_code == 500

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        """A closed port is a transport error."""
        server = ThreadingHTTPServer(("127.0.0.1", 0), ChainHandler)
        url = get_server_url(server, "/")
        server.server_close()

        outcome = await _fetch(url, timeout_seconds=2.0)

        assert outcome.error is not None
        assert outcome.error.error_class in (
            FetchErrorClass.TRANSPORT_ERROR,
            FetchErrorClass.TIMEOUT,
        )
