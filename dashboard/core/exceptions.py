from fastapi import HTTPException, status

from dashboard.services.commits.exceptions import (
    CommitQueryError,
    InvalidQuery,
    NoCredential,
    NoRepositoriesConfigured,
)


class NotAuthenticatedError(HTTPException):
    """Raised when the request carries no valid session."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
        )


class ReauthenticationRequired(HTTPException):
    """Raised when the tenant's GitHub token is missing."""

    def __init__(self, message: str = "GitHub token not configured, please re-authenticate"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "no_credential", "message": message},
        )


class NoRepositoriesError(HTTPException):
    """Raised when the tenant has not selected any repositories."""

    def __init__(self, message: str = "No repositories selected"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "no_repositories", "message": message},
        )


class ValidationError(HTTPException):
    """Raised when request validation fails."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
        )


def to_http_exception(error: CommitQueryError) -> HTTPException:
    """Map a typed query failure to the response the frontend expects."""
    if isinstance(error, NoCredential):
        return ReauthenticationRequired(error.message)
    if isinstance(error, NoRepositoriesConfigured):
        return NoRepositoriesError(error.message)
    if isinstance(error, InvalidQuery):
        return ValidationError(error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)
