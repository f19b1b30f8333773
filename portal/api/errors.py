"""
Translate domain exceptions into HTTP errors.
"""

from fastapi import HTTPException, status

from portal.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateError,
    InfrastructureError,
    NotFoundError,
    PortalError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (InfrastructureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def to_http_exception(exc: PortalError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
