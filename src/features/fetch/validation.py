"""URL scheme validation performed before any network I/O."""

from urllib.parse import urljoin, urlsplit

import httpx

from src.features.fetch.constants import SUPPORTED_SCHEMES
from src.features.fetch.models import FetchAbortedError, FetchErrorClass


def validate_scheme(url: str) -> str:
    """Validate that a URL targets http or https.

    Args:
        url: URL to validate.

    Returns:
        The lower-cased scheme.

    Raises:
        FetchAbortedError: With INVALID_SCHEME if the URL cannot be parsed,
            has another scheme, or has no host.
    """
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise FetchAbortedError.build(
            FetchErrorClass.INVALID_SCHEME,
            f"Unparseable URL: {e}",
            url=url,
        ) from e

    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise FetchAbortedError.build(
            FetchErrorClass.INVALID_SCHEME,
            f"Unsupported scheme: {scheme or '<none>'}",
            url=url,
        )
    if not parts.netloc:
        raise FetchAbortedError.build(
            FetchErrorClass.INVALID_SCHEME,
            "URL has no host",
            url=url,
        )
    return scheme


def is_fetchable(url: str) -> bool:
    """Check whether a URL passes scheme validation."""
    try:
        validate_scheme(url)
    except FetchAbortedError:
        return False
    return True


def normalize_url(url: str) -> str:
    """Validate a URL and return its ASCII wire form.

    Non-ASCII path and query characters are percent-encoded and hosts are
    IDNA-encoded, so the URL can be sent both as the request target and as
    a Referer header.

    Args:
        url: Absolute URL to validate.

    Returns:
        The normalized URL.

    Raises:
        FetchAbortedError: With INVALID_SCHEME if the scheme is not http or
            https, or the URL cannot be encoded.
    """
    validate_scheme(url)
    try:
        parsed = httpx.URL(url)
        host = parsed.host
    except (httpx.InvalidURL, ValueError) as e:
        raise FetchAbortedError.build(
            FetchErrorClass.INVALID_SCHEME,
            f"Invalid URL: {e}",
            url=url,
        ) from e
    if not host:
        raise FetchAbortedError.build(
            FetchErrorClass.INVALID_SCHEME,
            "URL has no host",
            url=url,
        )
    return str(parsed)


def resolve_url(base: str, target: str) -> str:
    """Resolve a redirect or refresh target against the current hop URL.

    Args:
        base: URL of the hop that produced the target.
        target: Raw Location or refresh target, possibly relative.

    Returns:
        The normalized absolute URL.

    Raises:
        FetchAbortedError: With INVALID_SCHEME if the target is malformed or
            not http(s).
    """
    try:
        absolute = urljoin(base, target)
    except ValueError as e:
        raise FetchAbortedError.build(
            FetchErrorClass.INVALID_SCHEME,
            f"Invalid redirect target: {e}",
            url=base,
        ) from e
    return normalize_url(absolute)
