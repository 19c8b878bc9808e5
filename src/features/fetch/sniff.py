"""Markup sniffing: meta-refresh targets and character encodings.

All functions here are pure. They take a bounded byte prefix (or header
value) and never touch the network, so the chain can call them between
hops and tests can call them directly.
"""

import re

from src.features.fetch.constants import (
    DEFAULT_CHARSET,
    SINGLE_BYTE_CHARSETS,
    SNIFF_PREFIX_BYTES,
)
from src.features.fetch.models import MetaRefresh


_META_REFRESH_RE = re.compile(
    r"""http-equiv=["']?refresh["']?[^>]*"""
    r"""content=["']?\s*(\d+)\s*;\s*url=([^"'>\s]+)""",
    re.IGNORECASE,
)
_HEADER_CHARSET_RE = re.compile(r"charset=([^;]+)", re.IGNORECASE)
_META_CHARSET_RE = re.compile(
    r"""<meta[^>]+charset=["']?\s*([a-zA-Z0-9_-]+)""",
    re.IGNORECASE,
)
_META_CONTENT_TYPE_RE = re.compile(
    r"""<meta[^>]+http-equiv=["']content-type["'][^>]*"""
    r"""content=["'][^"']*charset=([^"'>\s]+)""",
    re.IGNORECASE,
)


def sniff_prefix(body: bytes, limit: int = SNIFF_PREFIX_BYTES) -> str:
    """Decode the head of a body as single-byte text for pattern matching.

    Args:
        body: Full response body.
        limit: Number of leading bytes to examine.

    Returns:
        The prefix decoded as Latin-1 (every byte maps to one character).
    """
    return body[:limit].decode("latin-1")


def find_meta_refresh(prefix: str) -> MetaRefresh | None:
    """Find an HTML meta-refresh instruction.

    Args:
        prefix: Sniffed head of the document.

    Returns:
        The delay and raw target, or None if no instruction is present.
    """
    match = _META_REFRESH_RE.search(prefix)
    if match is None:
        return None
    return MetaRefresh(delay=int(match.group(1)), target=match.group(2))


def charset_from_content_type(content_type: str | None) -> str | None:
    """Extract the charset parameter from a Content-Type header value."""
    if not content_type:
        return None
    match = _HEADER_CHARSET_RE.search(content_type)
    if match is None:
        return None
    charset = match.group(1).strip().strip("\"'").lower()
    return charset or None


def charset_from_markup(prefix: str) -> str | None:
    """Extract a charset declared by a meta tag in the document head.

    ``<meta charset>`` takes priority over the http-equiv content-type form.
    """
    match = _META_CHARSET_RE.search(prefix)
    if match:
        return match.group(1).strip().lower()
    match = _META_CONTENT_TYPE_RE.search(prefix)
    if match:
        return match.group(1).strip().lower()
    return None


def resolve_charset(content_type: str | None, prefix: str) -> str:
    """Resolve the body charset from header, markup, or the default.

    Args:
        content_type: Content-Type header value, if any.
        prefix: Sniffed head of the document.

    Returns:
        Lower-cased charset name.
    """
    return (
        charset_from_content_type(content_type)
        or charset_from_markup(prefix)
        or DEFAULT_CHARSET
    )


def decode_body(body: bytes, charset: str) -> str:
    """Decode a body with the resolved charset.

    The single-byte family decodes as Latin-1; everything else is treated
    as UTF-8 with invalid sequences replaced.
    """
    if charset.lower() in SINGLE_BYTE_CHARSETS:
        return body.decode("latin-1")
    return body.decode("utf-8", errors="replace")
