# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Access Guard – FastAPI dependencies that gate every protected route.

Per-request outcome
-------------------
* no ``Authorization: Bearer`` header      → 401  (unauthenticated)
* token present but fails verification     → 401  (invalid)
* valid token, admin route, role != Admin  → 403  (forbidden)
* otherwise                                → claims passed to the handler

Verification is purely computational (signature + clock) – no database
access happens here, and nothing is cached between requests.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.errors import AuthenticationFailure, AuthorizationFailure
from core.passwords import PasswordHasher
from core.tokens import TokenClaims, TokenService

# auto_error=False so a missing header reaches our own 401 (with the
# WWW-Authenticate header) instead of FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Service accessors – built once in main.create_app and parked on app.state
# ---------------------------------------------------------------------------


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Dependency: require a valid bearer token and return its claims.
    Raises 401 if the header is missing or the token does not verify.
    """
    if credentials is None:
        raise AuthenticationFailure("Not authenticated")
    return tokens.verify(credentials.credentials)


def get_optional_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims | None:
    """
    Dependency for public routes that reveal more to signed-in callers.
    No header → None; a header with a bad token is still a 401.
    """
    if credentials is None:
        return None
    return tokens.verify(credentials.credentials)


def require_admin(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
    """
    Dependency: wraps :func:`get_current_claims` and additionally asserts
    the role claim is Admin.  Raises 403 otherwise.
    """
    if not claims.is_admin:
        raise AuthorizationFailure()
    return claims


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    Returns the IP address as a string (supports both IPv4 and IPv6).
    """
    # Check X-Forwarded-For header (common when behind proxy/load balancer)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    # Fall back to direct client address
    if request.client:
        return request.client.host

    return "unknown"
