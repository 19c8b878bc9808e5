"""HTTP constants for the fetch layer.

Centralizes all fetch-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Statuses followed by the redirect coordinator
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

# Chain limits
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MiB
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_POOL_SIZE = 32

# Markup sniffing
SNIFF_PREFIX_BYTES = 4096
META_REFRESH_MAX_DELAY_SECONDS = 2

# Request headers
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/109.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_ENCODING = "gzip, deflate, br"

# Charsets decoded byte-for-byte as Latin-1
SINGLE_BYTE_CHARSETS = frozenset({"iso-8859-1", "latin1", "windows-1252"})
DEFAULT_CHARSET = "utf-8"

SUPPORTED_SCHEMES = frozenset({"http", "https"})
