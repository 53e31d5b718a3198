"""
Domain exceptions raised by the crud layer.

Each one is an ``HTTPException`` so a router can let it propagate and the
handlers in ``shared.exception_handler`` turn it into the standard
``{success, data, error}`` envelope.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from shared.utils.app_status_code import AppStatusCode


class APIError(HTTPException):
    """Base API error with an application status code"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        app_status_code: str = AppStatusCode.OPERATION_FAILED,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.app_status_code = app_status_code


class NotFoundError(APIError):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            app_status_code=AppStatusCode.NOT_FOUND,
        )


class ValidationError(APIError):
    def __init__(self, detail: str = "Validation failed"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            app_status_code=AppStatusCode.INVALID_INPUT,
        )


class DuplicateKeyError(APIError):
    def __init__(self, detail: str = "Duplicate value"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            app_status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
        )


class InvalidTransitionError(APIError):
    """Lifecycle state change not allowed from the current state"""

    def __init__(self, current_state: str, target_state: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot transition lifecycle state from '{current_state}' to '{target_state}'",
            app_status_code=AppStatusCode.INVALID_TRANSITION,
        )


class UpstreamLookupFailure(Exception):
    """Secondary store lookup failed. Logged by enrichment, never surfaced to clients."""
