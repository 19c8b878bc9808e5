"""Failure classification for callers of the fetch layer.

This module provides:
- ErrorResponse model (status code and user-facing message)
- Error mappers from fetch failures to responses
"""

from src.features.status.error_mapper import (
    map_error_class_to_status,
    map_fetch_error_to_response,
)
from src.features.status.models import FAILURE_MESSAGE, ErrorResponse


__all__ = [
    "FAILURE_MESSAGE",
    "ErrorResponse",
    "map_error_class_to_status",
    "map_fetch_error_to_response",
]
