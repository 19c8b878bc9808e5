"""Resilient HTTP retrieval producing decoded text.

This module provides:
- Scheme validation before any network I/O
- Pooled keep-alive transport with browser-like headers and a hard timeout
- Protocol and meta-refresh redirects under one shared budget
- Cookie and referer propagation across the hops of one chain
- Streaming decompression (gzip, deflate, brotli) under a byte ceiling
- Charset detection from headers or markup
"""

from src.features.fetch.client import UrlFetcher
from src.features.fetch.config import FetchConfig
from src.features.fetch.constants import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_POOL_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    REDIRECT_STATUSES,
    SNIFF_PREFIX_BYTES,
)
from src.features.fetch.dispatcher import DispatchError, ResultDispatcher
from src.features.fetch.metrics import FetchMetrics
from src.features.fetch.models import (
    FetchAbortedError,
    FetchError,
    FetchErrorClass,
    FetchOutcome,
    FetchRequest,
    MetaRefresh,
)
from src.features.fetch.pools import ConnectionPools
from src.features.fetch.redact import redact_headers, redact_url_credentials
from src.features.fetch.session import SessionState
from src.features.fetch.state_machine import (
    FetchState,
    FetchStateError,
    FetchStateMachine,
)
from src.features.fetch.validation import is_fetchable, validate_scheme


__all__ = [
    # Client
    "UrlFetcher",
    "ConnectionPools",
    # Config
    "FetchConfig",
    # Models
    "FetchOutcome",
    "FetchError",
    "FetchErrorClass",
    "FetchAbortedError",
    "FetchRequest",
    "MetaRefresh",
    "SessionState",
    # State machine
    "FetchState",
    "FetchStateError",
    "FetchStateMachine",
    # Dispatch
    "ResultDispatcher",
    "DispatchError",
    # Constants
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_POOL_SIZE",
    "REDIRECT_STATUSES",
    "SNIFF_PREFIX_BYTES",
    # Metrics
    "FetchMetrics",
    # Validation
    "validate_scheme",
    "is_fetchable",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
