"""URL fetcher: redirect coordination, meta refresh and decoding."""

import time
import uuid
from dataclasses import dataclass
import httpx
import structlog

from src.features.fetch.config import FetchConfig
from src.features.fetch.constants import (
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    REDIRECT_STATUSES,
)
from src.features.fetch.decompress import read_body
from src.features.fetch.dispatcher import (
    FailureCallback,
    ResultDispatcher,
    SuccessCallback,
)
from src.features.fetch.metrics import FetchMetrics
from src.features.fetch.models import (
    FetchAbortedError,
    FetchError,
    FetchErrorClass,
    FetchOutcome,
    FetchRequest,
)
from src.features.fetch.pools import ConnectionPools
from src.features.fetch.redact import redact_url_credentials
from src.features.fetch.session import SessionState
from src.features.fetch.sniff import (
    decode_body,
    find_meta_refresh,
    resolve_charset,
    sniff_prefix,
)
from src.features.fetch.state_machine import FetchState, FetchStateMachine
from src.features.fetch.transport import TransportClient
from src.features.fetch.validation import (
    normalize_url,
    resolve_url,
    validate_scheme,
)


logger = structlog.get_logger()


@dataclass(frozen=True)
class HopResult:
    """What one hop produced: either a redirect target or a full body."""

    url: str
    status_code: int
    redirect_to: str | None = None
    body: bytes = b""
    prefix: str = ""
    content_type: str | None = None


class UrlFetcher:
    """Retrieves a URL as decoded text.

    Follows protocol redirects and immediate meta refreshes under one
    shared redirect budget, carries cookies and referer between hops,
    decompresses under a byte ceiling and decodes the final body.

    Every call to :meth:`fetch` owns a fresh :class:`SessionState`; only
    the connection pools are shared between concurrent calls.
    """

    def __init__(
        self,
        pools: ConnectionPools,
        config: FetchConfig | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            pools: Shared per-scheme connection pools.
            config: Fetch configuration (defaults if omitted).
        """
        self._config = config or FetchConfig()
        self._transport = TransportClient(pools, self._config)
        self._metrics = FetchMetrics.get_instance()

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    async def fetch(self, url: str) -> FetchOutcome:
        """Fetch a URL and decode its body.

        Args:
            url: The URL to fetch.

        Returns:
            FetchOutcome holding either the text or the failure.
        """
        start_time_ns = time.perf_counter_ns()
        chain_id = uuid.uuid4().hex[:12]
        log = logger.bind(
            component="fetch",
            chain_id=chain_id,
            url=redact_url_credentials(url),
        )
        machine = FetchStateMachine(chain_id)
        request = FetchRequest(url=url)

        try:
            request = FetchRequest(url=normalize_url(url))
            session = SessionState(referer=request.url)
            while True:
                hop = await self._run_hop(request, session, machine, log)
                next_url = hop.redirect_to or self._meta_refresh_target(
                    request, hop, machine, log
                )
                if next_url is None:
                    break
                session.advance_referer(request.url)
                request = request.follow(next_url)
            outcome = self._decode(url, request, hop, machine)
        except FetchAbortedError as e:
            outcome = self._fail(url, request, e.error, machine)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)
        log.info(
            "fetch_complete",
            success=outcome.is_success,
            redirect_count=outcome.redirect_count,
            charset=outcome.charset,
            chars=len(outcome.text) if outcome.text is not None else None,
            duration_ms=round(duration_ms, 2),
            error_class=outcome.error.error_class.value if outcome.error else None,
            status_code=outcome.error.status_code if outcome.error else None,
        )
        return outcome

    async def fetch_into(
        self,
        url: str,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> FetchOutcome:
        """Fetch a URL and hand the outcome to exactly one continuation.

        Args:
            url: The URL to fetch.
            on_success: Called with the decoded text.
            on_failure: Called with the failure description.

        Returns:
            The delivered outcome.
        """
        dispatcher = ResultDispatcher(on_success, on_failure)
        outcome = await self.fetch(url)
        dispatcher.deliver(outcome)
        return outcome

    async def _run_hop(
        self,
        request: FetchRequest,
        session: SessionState,
        machine: FetchStateMachine,
        log: structlog.stdlib.BoundLogger,
    ) -> HopResult:
        """Issue one request and read it to a redirect or a body.

        Raises:
            FetchAbortedError: On any terminal failure of the hop.
        """
        scheme = validate_scheme(request.url)
        machine.transition(FetchState.REQUESTING)

        async with self._transport.open(request.url, scheme, session, log) as response:
            status = response.status_code
            self._metrics.record_hop(status)
            session.absorb_set_cookies(
                value.decode("latin-1")
                for name, value in response.headers.raw
                if name.lower() == b"set-cookie"
            )
            log.debug(
                "hop_response",
                hop_url=redact_url_credentials(request.url),
                status_code=status,
                redirect_count=request.redirect_count,
            )

            if status in REDIRECT_STATUSES:
                return self._plan_redirect(request, response, machine, log)

            if not HTTP_STATUS_OK_MIN <= status < HTTP_STATUS_OK_MAX:
                raise FetchAbortedError.build(
                    FetchErrorClass.UPSTREAM_STATUS,
                    f"Upstream returned status {status}",
                    status_code=status,
                    url=request.url,
                )

            machine.transition(FetchState.READING_BODY)
            body = await read_body(response, self._config.max_bytes)
            return HopResult(
                url=request.url,
                status_code=status,
                body=body,
                prefix=sniff_prefix(body, self._config.sniff_prefix_bytes),
                content_type=response.headers.get("content-type"),
            )

    def _plan_redirect(
        self,
        request: FetchRequest,
        response: httpx.Response,
        machine: FetchStateMachine,
        log: structlog.stdlib.BoundLogger,
    ) -> HopResult:
        """Resolve a 3xx response into the next hop's URL."""
        status = response.status_code
        location = response.headers.get("location")
        if not location:
            raise FetchAbortedError.build(
                FetchErrorClass.UPSTREAM_STATUS,
                f"Redirect status {status} without Location header",
                status_code=status,
                url=request.url,
            )
        if request.redirect_count >= self._config.max_redirects:
            raise FetchAbortedError.build(
                FetchErrorClass.REDIRECT_LOOP,
                f"Exceeded {self._config.max_redirects} redirects",
                url=request.url,
            )

        target = resolve_url(request.url, location)
        machine.transition(FetchState.REDIRECTING)
        self._metrics.record_redirect()
        log.info(
            "redirect_follow",
            status_code=status,
            target=redact_url_credentials(target),
            redirect_count=request.redirect_count + 1,
        )
        return HopResult(url=request.url, status_code=status, redirect_to=target)

    def _meta_refresh_target(
        self,
        request: FetchRequest,
        hop: HopResult,
        machine: FetchStateMachine,
        log: structlog.stdlib.BoundLogger,
    ) -> str | None:
        """Decide whether an HTML meta refresh restarts the chain.

        Returns:
            Absolute refresh target, or None to decode this body.
        """
        refresh = find_meta_refresh(hop.prefix)
        if refresh is None:
            return None

        if (
            refresh.delay > self._config.meta_refresh_max_delay
            or request.redirect_count >= self._config.max_redirects
        ):
            log.info(
                "meta_refresh_ignored",
                delay=refresh.delay,
                redirect_count=request.redirect_count,
            )
            return None

        target = resolve_url(request.url, refresh.target)
        machine.transition(FetchState.META_REDIRECTING)
        self._metrics.record_meta_refresh()
        log.info(
            "meta_refresh_follow",
            delay=refresh.delay,
            target=redact_url_credentials(target),
            redirect_count=request.redirect_count + 1,
        )
        return target

    def _decode(
        self,
        url: str,
        request: FetchRequest,
        hop: HopResult,
        machine: FetchStateMachine,
    ) -> FetchOutcome:
        """Decode the final body into the success outcome."""
        machine.transition(FetchState.DECODING)
        charset = resolve_charset(hop.content_type, hop.prefix)
        text = decode_body(hop.body, charset)
        machine.transition(FetchState.SUCCEEDED)
        self._metrics.record_success(len(hop.body))
        return FetchOutcome(
            url=url,
            final_url=hop.url,
            text=text,
            charset=charset,
            redirect_count=request.redirect_count,
        )

    def _fail(
        self,
        url: str,
        request: FetchRequest,
        error: FetchError,
        machine: FetchStateMachine,
    ) -> FetchOutcome:
        """Build the failure outcome for an aborted chain."""
        machine.transition(FetchState.FAILED)
        self._metrics.record_failure(error.error_class)
        return FetchOutcome(
            url=url,
            final_url=request.url,
            redirect_count=request.redirect_count,
            error=error,
        )
