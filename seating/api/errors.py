"""
Translation of engine errors into HTTP responses
"""

from fastapi import HTTPException, status

from seating.core.exceptions import (
    ConcurrencyConflict,
    InvalidTransitionError,
    NotFoundError,
    SeatingError,
    TableOccupiedError,
    ValidationError,
)


def to_http_exception(error: SeatingError) -> HTTPException:
    """Map a seating error onto the matching status code"""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, (InvalidTransitionError, TableOccupiedError, ConcurrencyConflict)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))
