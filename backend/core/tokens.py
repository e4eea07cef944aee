# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
JWT access tokens – issuance and verification (PyJWT / HS256).

A ``TokenService`` is built once at start-up from configuration and then
shared read-only by every request.  Tokens are never persisted; each one is
re-validated from scratch on every use.

Claims
------
sub    identity id (string, per RFC 7519)
email  identity email
name   display name
role   "Admin" | "Resident"
jti    random UUID4, for log correlation only (there is no revocation list)
iss / aud / iat / exp
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT

from core.errors import AuthenticationFailure, ConfigurationError
from core.logger import logger
from core.roles import Role

# HS256 keys shorter than the digest size are trivially brute-forced.
MIN_SECRET_LENGTH = 32

_REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub", "jti"]


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims, handed to business logic for one request only."""

    subject: int
    email: str
    name: str
    role: Role
    token_id: str
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin


class TokenService:
    """Token Issuer + Token Verifier sharing one immutable configuration."""

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        audience: str,
        expire_minutes: int = 60,
        clock_skew_seconds: int = 300,
        algorithm: str = "HS256",
    ):
        if not secret_key or not secret_key.strip():
            raise ConfigurationError("SECRET_KEY must be set and non-empty")
        if len(secret_key) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters"
            )
        if not algorithm.startswith("HS"):
            raise ConfigurationError("JWT_ALGORITHM must be a symmetric HMAC algorithm (HS256/384/512)")
        if not issuer or not audience:
            raise ConfigurationError("JWT_ISSUER and JWT_AUDIENCE must be set")

        self._secret_key = secret_key
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm
        self.lifetime = timedelta(minutes=expire_minutes)
        self.leeway = timedelta(seconds=clock_skew_seconds)

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            secret_key=settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            expire_minutes=settings.access_token_expire_minutes,
            clock_skew_seconds=settings.clock_skew_seconds,
            algorithm=settings.jwt_algorithm,
        )

    # ---------------------------------------------------------------------
    # Issue
    # ---------------------------------------------------------------------

    def issue(self, user, now: Optional[datetime] = None) -> str:
        """
        Sign a token for a loaded Identity row.

        *user* must have ``id``, ``email``, ``full_name`` and ``role``
        populated.  *now* exists for tests that need back-dated tokens.
        """
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self.lifetime
        token_id = str(uuid.uuid4())

        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.full_name,
            "role": Role.parse(user.role).value,
            "jti": token_id,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = _jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

        logger.info(
            "Issued token for user %s jti=%s expires=%s",
            user.id,
            token_id,
            expires_at.isoformat(),
        )
        return token

    # ---------------------------------------------------------------------
    # Verify
    # ---------------------------------------------------------------------

    def verify(self, token: str) -> TokenClaims:
        """
        Validate signature, issuer/audience and expiry (with clock-skew
        leeway) and return the claims.

        Raises ``AuthenticationFailure`` on any problem; the caller never
        sees partial claims.
        """
        if not token:
            raise AuthenticationFailure()
        try:
            payload = _jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": _REQUIRED_CLAIMS},
            )
        except _jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise AuthenticationFailure()
        except _jwt.InvalidTokenError as exc:
            logger.info("Rejected invalid token: %s", type(exc).__name__)
            raise AuthenticationFailure()

        try:
            subject = int(payload["sub"])
        except (TypeError, ValueError):
            logger.info("Rejected token with non-numeric subject")
            raise AuthenticationFailure()

        email = payload.get("email")
        if not isinstance(email, str) or not email:
            logger.info("Rejected token without email claim")
            raise AuthenticationFailure()

        return TokenClaims(
            subject=subject,
            email=email,
            name=payload.get("name") or "",
            role=Role.parse(payload.get("role")),
            token_id=str(payload["jti"]),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
