"""Error mapping from fetch failures to caller-facing responses.

Follows Open/Closed Principle: extend by adding new mappings,
not by modifying existing code.
"""

from http import HTTPStatus

from src.features.fetch.models import FetchError, FetchErrorClass
from src.features.status.models import FAILURE_MESSAGE, ErrorResponse


_STATUS_BY_ERROR_CLASS: dict[FetchErrorClass, HTTPStatus] = {
    FetchErrorClass.INVALID_SCHEME: HTTPStatus.BAD_REQUEST,
    FetchErrorClass.UPSTREAM_STATUS: HTTPStatus.BAD_GATEWAY,
    FetchErrorClass.REDIRECT_LOOP: HTTPStatus.BAD_GATEWAY,
    FetchErrorClass.PAYLOAD_TOO_LARGE: HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
    FetchErrorClass.TRANSPORT_ERROR: HTTPStatus.GATEWAY_TIMEOUT,
    FetchErrorClass.TIMEOUT: HTTPStatus.GATEWAY_TIMEOUT,
}


def map_error_class_to_status(error_class: FetchErrorClass) -> int:
    """Map a fetch error class to the response status code.

    Args:
        error_class: Classification of the failure.

    Returns:
        HTTP status code for the caller's response.
    """
    return int(_STATUS_BY_ERROR_CLASS.get(error_class, HTTPStatus.GATEWAY_TIMEOUT))


def map_fetch_error_to_response(error: FetchError) -> ErrorResponse:
    """Map a fetch failure to a status code and user-facing message.

    Upstream statuses are embedded in the message; every other failure
    uses the generic message.

    Args:
        error: Failure from the fetch chain.

    Returns:
        ErrorResponse for the output sink.
    """
    status_code = map_error_class_to_status(error.error_class)

    if error.error_class == FetchErrorClass.UPSTREAM_STATUS and error.status_code:
        message = (
            f"{FAILURE_MESSAGE} as the website you are trying to convert "
            f"returned status code {error.status_code}"
        )
    elif error.error_class == FetchErrorClass.REDIRECT_LOOP:
        message = f"{FAILURE_MESSAGE} as the website redirected too many times"
    elif error.error_class == FetchErrorClass.PAYLOAD_TOO_LARGE:
        message = f"{FAILURE_MESSAGE} as the page is too large"
    else:
        message = FAILURE_MESSAGE

    return ErrorResponse(status_code=status_code, message=message)
