"""HTTP error taxonomy shared by guards, validators and controllers.

Each class pins the status code so call sites only supply the message.
"""
from typing import Any

from fastapi import HTTPException, status

from coperex.core.config import settings


class ValidationError(HTTPException):
    """One or more field rules failed."""

    def __init__(self, errors: list[dict[str, Any]], message: str = "Validation failed"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": message, "errors": errors},
        )
        self.errors = errors


class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "You do not have permission to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class PersistenceError(HTTPException):
    """Unexpected store failure.

    The raw error string is only included outside production.
    """

    def __init__(self, message: str, error: Exception | str | None = None):
        detail: dict[str, Any] = {"message": message}
        if error is not None and not settings.is_production:
            detail["error"] = str(error)
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
