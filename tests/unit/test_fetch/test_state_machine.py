"""Unit tests for the fetch chain state machine."""

import pytest

from src.features.fetch.state_machine import (
    FetchState,
    FetchStateError,
    FetchStateMachine,
)


def _machine_at(*path: FetchState) -> FetchStateMachine:
    machine = FetchStateMachine("test-chain")
    for state in path:
        machine.transition(state)
    return machine


class TestFetchState:
    """Tests for FetchState enum."""

    @pytest.mark.unit
    def test_all_states_defined(self) -> None:
        """Test that all expected states are defined."""
        expected_states = {
            "INIT",
            "REQUESTING",
            "REDIRECTING",
            "READING_BODY",
            "META_REDIRECTING",
            "DECODING",
            "SUCCEEDED",
            "FAILED",
        }
        assert {state.name for state in FetchState} == expected_states


class TestFetchStateMachine:
    """Tests for FetchStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """Test that initial state is INIT."""
        machine = FetchStateMachine("test-chain")
        assert machine.state == FetchState.INIT
        assert not machine.is_terminal()

    @pytest.mark.unit
    def test_redirect_then_success_path(self) -> None:
        """A redirect followed by a decoded body reaches SUCCEEDED."""
        machine = _machine_at(
            FetchState.REQUESTING,
            FetchState.REDIRECTING,
            FetchState.REQUESTING,
            FetchState.READING_BODY,
            FetchState.DECODING,
            FetchState.SUCCEEDED,
        )
        assert machine.is_terminal()

    @pytest.mark.unit
    def test_meta_refresh_path(self) -> None:
        """A meta refresh leads back to REQUESTING."""
        machine = _machine_at(
            FetchState.REQUESTING,
            FetchState.READING_BODY,
            FetchState.META_REDIRECTING,
            FetchState.REQUESTING,
        )
        assert machine.state == FetchState.REQUESTING

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "path",
        [
            (),
            (FetchState.REQUESTING,),
            (FetchState.REQUESTING, FetchState.REDIRECTING),
            (FetchState.REQUESTING, FetchState.READING_BODY),
            (
                FetchState.REQUESTING,
                FetchState.READING_BODY,
                FetchState.META_REDIRECTING,
            ),
            (
                FetchState.REQUESTING,
                FetchState.READING_BODY,
                FetchState.DECODING,
            ),
        ],
    )
    def test_failed_from_any_non_terminal(self, path: tuple[FetchState, ...]) -> None:
        """Every non-terminal state can fail."""
        machine = _machine_at(*path)
        machine.transition(FetchState.FAILED)
        assert machine.state == FetchState.FAILED
        assert machine.is_terminal()

    @pytest.mark.unit
    def test_body_cannot_be_read_without_request(self) -> None:
        """INIT cannot jump to READING_BODY."""
        machine = FetchStateMachine("test-chain")
        with pytest.raises(FetchStateError) as exc_info:
            machine.transition(FetchState.READING_BODY)
        assert exc_info.value.from_state == FetchState.INIT
        assert exc_info.value.to_state == FetchState.READING_BODY

    @pytest.mark.unit
    @pytest.mark.parametrize("terminal", [FetchState.SUCCEEDED, FetchState.FAILED])
    def test_terminal_states_are_final(self, terminal: FetchState) -> None:
        """No transition leaves a terminal state."""
        if terminal == FetchState.SUCCEEDED:
            machine = _machine_at(
                FetchState.REQUESTING,
                FetchState.READING_BODY,
                FetchState.DECODING,
                FetchState.SUCCEEDED,
            )
        else:
            machine = _machine_at(FetchState.FAILED)

        for state in FetchState:
            assert not machine.can_transition(state)
        with pytest.raises(FetchStateError):
            machine.transition(FetchState.FAILED)
