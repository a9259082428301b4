"""Error helpers that turn failures into HTTP responses."""
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from typing import Optional


def handle_database_error(error: Exception, operation: str) -> HTTPException:
    """
    Convert database errors to HTTP exceptions.

    Unique-constraint violations (duplicate email, slug, environment name or
    key hash) become 409 Conflict.

    Args:
        error: The database error
        operation: Description of the operation that failed

    Returns:
        HTTPException with appropriate status code
    """
    if isinstance(error, IntegrityError):
        return conflict_error(f"Resource already exists: {operation}")

    error_message = str(error)

    if "duplicate" in error_message.lower() or "unique" in error_message.lower():
        return conflict_error(f"Resource already exists: {operation}")

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Database error during {operation}",
    )


def not_found_error(resource: str, identifier: Optional[str] = None) -> HTTPException:
    """
    Create a standardized 404 error.

    Args:
        resource: Name of the resource (e.g., "Environment", "Project")
        identifier: Optional identifier that was not found

    Returns:
        HTTPException with 404 status
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def validation_error(message: str) -> HTTPException:
    """Create a standardized 400 validation error."""
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def authentication_error(message: str = "Not authenticated") -> HTTPException:
    """Create a standardized 401 authentication error."""
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


def conflict_error(message: str) -> HTTPException:
    """Create a standardized 409 conflict error."""
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message)
