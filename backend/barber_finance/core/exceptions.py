"""Custom exception classes for the application."""

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """HTTP error rendered as ``{success, error, message, correlationId, durationMs}``."""

    error = "Error"

    def __init__(self, status_code: int, detail: str, headers: dict[str, str] | None = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class BadRequestError(ApiError):
    error = "Bad Request"

    def __init__(self, detail: str = "Invalid request parameters"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


class UnauthorizedError(ApiError):
    error = "Unauthorized"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(ApiError):
    error = "Forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class NotFoundError(ApiError):
    error = "Not Found"

    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found")


class InsufficientDataError(ApiError):
    """No transaction exists in the lookback window."""

    error = "No historical data available"

    def __init__(self, detail: str = "Insufficient historical data to generate forecast"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class InternalServerError(ApiError):
    error = "Internal Server Error"

    def __init__(self, detail: str = "Failed to process request"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
