"""Per-chain session state: cookies and referer carried across hops."""

from collections.abc import Iterable
from dataclasses import dataclass


COOKIE_SEPARATOR = "; "


@dataclass
class SessionState:
    """Cookies and referer threaded through one fetch chain.

    Owned by exactly one chain. Cookie attributes (domain, path, expiry)
    are discarded and cookies from every host are sent to every later hop.

    Attributes:
        referer: URL sent as Referer on the next hop.
        cookie: Accumulated ``name=value`` pairs joined with ``"; "``. Header
            bytes are kept as Latin-1 text so they go back out unchanged.
    """

    referer: str
    cookie: str = ""

    def absorb_set_cookies(self, set_cookies: Iterable[str]) -> None:
        """Append the name=value part of each Set-Cookie header.

        Args:
            set_cookies: Set-Cookie header values from one response, decoded
                as Latin-1.
        """
        pairs = [value.split(";", 1)[0].strip() for value in set_cookies]
        pairs = [pair for pair in pairs if pair]
        if not pairs:
            return
        if self.cookie:
            pairs.insert(0, self.cookie)
        self.cookie = COOKIE_SEPARATOR.join(pairs)

    def advance_referer(self, completed_url: str) -> None:
        """Record the hop just completed as referer for the next one."""
        self.referer = completed_url

    def request_headers(self) -> dict[str, str | bytes]:
        """Get the Referer and Cookie headers for the next hop.

        The Cookie value is sent as raw bytes, as received in Set-Cookie.
        """
        headers: dict[str, str | bytes] = {"Referer": self.referer}
        if self.cookie:
            headers["Cookie"] = self.cookie.encode("latin-1", errors="replace")
        return headers
