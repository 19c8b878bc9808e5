"""Streaming decompression with a hard byte ceiling."""

import httpx
import structlog

from src.features.fetch.models import FetchAbortedError, FetchErrorClass
from src.features.fetch.redact import redact_url_credentials


logger = structlog.get_logger()

# Checked in order against the lower-cased Content-Encoding value
ENCODING_TOKENS = ("br", "gzip", "deflate")
IDENTITY_ENCODING = "identity"


def select_encoding(content_encoding: str | None) -> str:
    """Choose the coding to decode by case-insensitive substring.

    Unlike httpx, which applies every listed coding and skips unknown
    names, one coding is chosen: ``br``, then ``gzip``, then ``deflate``.
    ``x-gzip`` therefore decodes as gzip.

    Args:
        content_encoding: Raw Content-Encoding header value.

    Returns:
        ``br``, ``gzip``, ``deflate`` or ``identity``.
    """
    encoding = (content_encoding or "").lower()
    for token in ENCODING_TOKENS:
        if token in encoding:
            return token
    return IDENTITY_ENCODING


class StreamGuard:
    """Accumulates decoded chunks while enforcing a byte ceiling.

    Attributes:
        max_bytes: Largest body accepted.
        total: Decoded bytes accepted so far.
    """

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        self.total = 0
        self.tripped = False
        self._chunks: list[bytes] = []

    def feed(self, chunk: bytes) -> bool:
        """Accept a decoded chunk.

        Args:
            chunk: Decoded bytes.

        Returns:
            False if the chunk pushed the total over the ceiling. The chunk
            is not kept and every later call also returns False.
        """
        if self.tripped:
            return False
        if not chunk:
            return True
        self.total += len(chunk)
        if self.total > self.max_bytes:
            self.tripped = True
            self._chunks.clear()
            return False
        self._chunks.append(chunk)
        return True

    def body(self) -> bytes:
        """Concatenate every accepted chunk."""
        return b"".join(self._chunks)


def decoder_finished(response: httpx.Response) -> bool:
    """Check that the response's content decoder reached end of stream.

    httpx flushes its decoders without reporting a truncated stream, so
    the underlying zlib or brotli object is asked directly. Bodies with no
    raw bytes count as complete.
    """
    if response.num_bytes_downloaded == 0:
        return True
    decompressor = getattr(response._get_content_decoder(), "decompressor", None)
    if decompressor is None:
        return True
    if hasattr(decompressor, "eof"):
        return bool(decompressor.eof)
    is_finished = getattr(decompressor, "is_finished", None)
    return bool(is_finished()) if is_finished is not None else True


async def read_body(response: httpx.Response, max_bytes: int) -> bytes:
    """Read and decompress a streaming response body under a byte ceiling.

    httpx decodes each raw chunk as it arrives, so the ceiling counts
    decompressed bytes. On overflow the response is closed before raising,
    so no further raw chunks are pulled off the connection.

    Args:
        response: Streaming response whose body has not been read.
        max_bytes: Maximum decompressed size.

    Returns:
        The full decompressed body.

    Raises:
        FetchAbortedError: PAYLOAD_TOO_LARGE on overflow, TRANSPORT_ERROR
            when the encoded stream is corrupt or truncated.
    """
    encoding = select_encoding(response.headers.get("content-encoding"))
    # httpx builds its decoder from this header on the first read
    response.headers["content-encoding"] = encoding
    guard = StreamGuard(max_bytes)
    url = str(response.url)

    try:
        async for chunk in response.aiter_bytes():
            if not guard.feed(chunk):
                break
    except httpx.DecodingError as e:
        await response.aclose()
        raise FetchAbortedError.build(
            FetchErrorClass.TRANSPORT_ERROR,
            f"Failed to decode {encoding} body: {e}",
            url=url,
        ) from e

    if guard.tripped:
        await response.aclose()
        logger.warning(
            "payload_too_large",
            component="fetch",
            url=redact_url_credentials(url),
            max_bytes=max_bytes,
            encoding=encoding,
        )
        raise FetchAbortedError.build(
            FetchErrorClass.PAYLOAD_TOO_LARGE,
            f"Response body exceeded limit of {max_bytes} bytes",
            url=url,
        )

    if not decoder_finished(response):
        raise FetchAbortedError.build(
            FetchErrorClass.TRANSPORT_ERROR,
            f"Truncated {encoding} body: unexpected end of stream",
            url=url,
        )

    return guard.body()
