# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Portal error hierarchy.

Every error carries the HTTP status it maps to and a message that is safe
to show to the caller.  ``main.py`` registers a single exception handler
for :class:`PortalError`, so routers and services raise these instead of
building ``HTTPException`` objects by hand.

Usage:
    from core.errors import ConflictError

    if existing:
        raise ConflictError("Email is already registered")
"""

from fastapi import status


class PortalError(Exception):
    """Base class for all portal errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


# -- Input errors --------------------------------------------------------------


class ValidationError(PortalError):
    """Malformed or missing request input."""

    # Literal: Starlette renamed the constant to HTTP_422_UNPROCESSABLE_CONTENT
    status_code = 422
    default_message = "Invalid input"


class InvalidInput(ValidationError):
    """Password hasher received a missing plaintext or a malformed salt."""

    default_message = "Invalid hashing input"


class ConflictError(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


# -- Authentication & authorization ------------------------------------------


class AuthenticationFailure(PortalError):
    """
    Bad credentials, or a missing / invalid / expired / malformed token.
    The message is deliberately uniform so the root cause is not leaked.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"

    @property
    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class AuthorizationFailure(PortalError):
    """Valid token, but the role claim does not grant access."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


# -- Deployment ----------------------------------------------------------------


class ConfigurationError(PortalError):
    """Missing or unusable configuration.  Raised at start-up, never per request."""

    default_message = "Invalid configuration"
