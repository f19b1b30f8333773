"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class PortalError(Exception):
    """Base exception for the achievement portal."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(PortalError):
    """Resource not found."""

    pass


class DuplicateError(PortalError):
    """Duplicate resource detected."""

    pass


class ValidationError(PortalError):
    """Validation error."""

    pass


class AuthenticationError(PortalError):
    """Authentication failed (no credential presented)."""

    pass


class AuthorizationError(PortalError):
    """Authorization failed."""

    pass


class ForbiddenError(AuthorizationError):
    """Forbidden operation (authorization denied)."""

    pass


class InfrastructureError(PortalError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class TransientStoreError(InfrastructureError):
    """A persistence call failed; the caller may retry."""

    pass
