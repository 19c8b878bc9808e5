"""Unit tests for error mapper module."""

import pytest

from src.features.fetch.models import FetchError, FetchErrorClass
from src.features.status.error_mapper import (
    map_error_class_to_status,
    map_fetch_error_to_response,
)
from src.features.status.models import FAILURE_MESSAGE


def _error(error_class: FetchErrorClass, status_code: int | None = None) -> FetchError:
    return FetchError(error_class=error_class, message="x", status_code=status_code)


class TestMapErrorClassToStatus:
    """Tests for map_error_class_to_status."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("error_class", "status"),
        [
            (FetchErrorClass.INVALID_SCHEME, 400),
            (FetchErrorClass.UPSTREAM_STATUS, 502),
            (FetchErrorClass.REDIRECT_LOOP, 502),
            (FetchErrorClass.PAYLOAD_TOO_LARGE, 413),
            (FetchErrorClass.TRANSPORT_ERROR, 504),
            (FetchErrorClass.TIMEOUT, 504),
        ],
    )
    def test_status_per_class(self, error_class: FetchErrorClass, status: int) -> None:
        """Every error class has a fixed response status."""
        assert map_error_class_to_status(error_class) == status


class TestMapFetchErrorToResponse:
    """Tests for map_fetch_error_to_response."""

    @pytest.mark.unit
    def test_upstream_status_in_message(self) -> None:
        """The upstream status code appears in the message."""
        response = map_fetch_error_to_response(
            _error(FetchErrorClass.UPSTREAM_STATUS, 404)
        )
        assert response.status_code == 502
        assert response.message.startswith(FAILURE_MESSAGE)
        assert "returned status code 404" in response.message

    @pytest.mark.unit
    def test_redirect_loop_message(self) -> None:
        """Redirect loops explain themselves."""
        response = map_fetch_error_to_response(_error(FetchErrorClass.REDIRECT_LOOP))
        assert "redirected too many times" in response.message

    @pytest.mark.unit
    def test_payload_too_large_message(self) -> None:
        """Oversized pages explain themselves."""
        response = map_fetch_error_to_response(
            _error(FetchErrorClass.PAYLOAD_TOO_LARGE)
        )
        assert response.status_code == 413
        assert "too large" in response.message

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error_class",
        [
            FetchErrorClass.TIMEOUT,
            FetchErrorClass.TRANSPORT_ERROR,
            FetchErrorClass.INVALID_SCHEME,
        ],
    )
    def test_generic_message(self, error_class: FetchErrorClass) -> None:
        """Other failures use the generic message."""
        assert map_fetch_error_to_response(_error(error_class)).message == (
            FAILURE_MESSAGE
        )
