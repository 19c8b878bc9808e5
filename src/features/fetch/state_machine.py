"""Fetch chain lifecycle state machine implementation."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class FetchState(Enum):
    """Fetch chain states.

    State transitions:
        INIT -> REQUESTING: First hop issued
        REQUESTING -> REDIRECTING: 3xx with a followable Location
        REQUESTING -> READING_BODY: 2xx, body streaming begins
        REDIRECTING -> REQUESTING: Next hop issued
        READING_BODY -> META_REDIRECTING: Immediate meta refresh found
        READING_BODY -> DECODING: Body complete, no refresh followed
        META_REDIRECTING -> REQUESTING: Refresh target requested
        DECODING -> SUCCEEDED: Text produced
        any non-terminal -> FAILED: Chain aborted
    """

    INIT = auto()
    REQUESTING = auto()
    REDIRECTING = auto()
    READING_BODY = auto()
    META_REDIRECTING = auto()
    DECODING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class FetchStateError(Exception):
    """Raised when an invalid chain state transition is attempted."""

    def __init__(self, from_state: FetchState, to_state: FetchState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid fetch state transition: {from_state.name} -> {to_state.name}"
        )


class FetchStateMachine:
    """State machine for one fetch chain.

    Enforces that the chain moves through hops in order and reaches a
    terminal state exactly once.
    """

    VALID_TRANSITIONS: ClassVar[dict[FetchState, set[FetchState]]] = {
        FetchState.INIT: {FetchState.REQUESTING, FetchState.FAILED},
        FetchState.REQUESTING: {
            FetchState.REDIRECTING,
            FetchState.READING_BODY,
            FetchState.FAILED,
        },
        FetchState.REDIRECTING: {FetchState.REQUESTING, FetchState.FAILED},
        FetchState.READING_BODY: {
            FetchState.META_REDIRECTING,
            FetchState.DECODING,
            FetchState.FAILED,
        },
        FetchState.META_REDIRECTING: {FetchState.REQUESTING, FetchState.FAILED},
        FetchState.DECODING: {FetchState.SUCCEEDED, FetchState.FAILED},
        FetchState.SUCCEEDED: set(),  # Terminal state
        FetchState.FAILED: set(),  # Terminal state
    }

    def __init__(self, chain_id: str) -> None:
        """Initialize the state machine in INIT state.

        Args:
            chain_id: Unique chain identifier for logging.
        """
        self._chain_id = chain_id
        self._state = FetchState.INIT
        self._log = logger.bind(chain_id=chain_id, component="fetch")

    @property
    def state(self) -> FetchState:
        """Get the current state."""
        return self._state

    def can_transition(self, to_state: FetchState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: FetchState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            FetchStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise FetchStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "fetch_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def is_terminal(self) -> bool:
        """Check if the chain has finished."""
        return self._state in (FetchState.SUCCEEDED, FetchState.FAILED)
