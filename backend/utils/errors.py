"""Error taxonomy surfaced to API clients.

Every error is an ``HTTPException`` so FastAPI short-circuits the request,
and ``main.py`` renders all of them into the ``{success, statusCode, message}``
envelope.
"""
from typing import Optional
from fastapi import HTTPException, status


class ApiError(HTTPException):
    code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: Optional[dict] = None):
        super().__init__(status_code=self.code, detail=message, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


class InvalidError(ApiError):
    """Validation or business rule violation."""
    code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ApiError):
    """Missing, invalid or expired credentials."""
    code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ApiError):
    """Role or ownership mismatch."""
    code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    """Entity absent or not owned by the caller."""
    code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    """Uniqueness violation."""
    code = status.HTTP_409_CONFLICT
