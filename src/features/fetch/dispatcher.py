"""Single-shot delivery of a chain's terminal outcome."""

from collections.abc import Callable

import structlog

from src.features.fetch.models import FetchError, FetchOutcome


logger = structlog.get_logger()

SuccessCallback = Callable[[str], None]
FailureCallback = Callable[[FetchError], None]


class DispatchError(Exception):
    """Raised when an outcome is delivered more than once."""


class ResultDispatcher:
    """Invokes the success or the failure continuation exactly once."""

    def __init__(
        self,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            on_success: Receives decoded text.
            on_failure: Receives the failure description.
        """
        self._on_success = on_success
        self._on_failure = on_failure
        self._delivered: FetchOutcome | None = None

    @property
    def delivered(self) -> bool:
        """Whether an outcome has been delivered."""
        return self._delivered is not None

    def deliver(self, outcome: FetchOutcome) -> None:
        """Deliver a terminal outcome to the matching continuation.

        Args:
            outcome: The chain's outcome.

        Raises:
            DispatchError: If an outcome was already delivered.
        """
        if self._delivered is not None:
            logger.error(
                "invariant_violation",
                component="fetch",
                error_type="duplicate_dispatch",
                url=outcome.url,
            )
            msg = f"Outcome for {outcome.url} already delivered"
            raise DispatchError(msg)

        self._delivered = outcome
        if outcome.error is not None:
            self._on_failure(outcome.error)
        else:
            # text is set whenever error is None
            self._on_success(outcome.text or "")
