# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Credential Store – every read and write of Identity rows goes through here.

Security notes
--------------
* Emails are normalised (trimmed, lower-cased) before they touch the
  database, so the unique index on ``users.email`` is what guarantees
  case-insensitive uniqueness – including under concurrent registration,
  where the losing INSERT surfaces as ``ConflictError``.
* ``authenticate`` runs one PBKDF2 derivation even when the email is
  unknown, and raises the same ``AuthenticationFailure`` for every failure
  cause, so neither the response nor its timing tells the caller whether
  the account exists.
"""

import re
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import (
    AuthenticationFailure,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core.logger import logger
from core.passwords import PasswordHasher
from core.roles import DEFAULT_ROLE, Role
from models.audit_log import AuditLog
from models.user import User

# Generic message used for "no such email", "wrong password" and "disabled"
LOGIN_FAIL = "Invalid email or password"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Fields a user may change on their own profile
PROFILE_FIELDS = ("full_name", "mobile_no", "state", "district", "village", "address")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class CredentialStore:
    """Identity persistence bound to one request's DB session."""

    def __init__(self, db: Session, hasher: PasswordHasher, password_min_length: int = 6):
        self.db = db
        self.hasher = hasher
        self.password_min_length = password_min_length

    # ---------------------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------------------

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def get(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_all(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    # ---------------------------------------------------------------------
    # Validation
    # ---------------------------------------------------------------------

    def validate_password(self, password: str) -> None:
        if not password or len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters"
            )

    @staticmethod
    def validate_email(email: str) -> str:
        normalized = normalize_email(email)
        if not _EMAIL_RE.match(normalized):
            raise ValidationError("A valid email address is required")
        return normalized

    # ---------------------------------------------------------------------
    # Create
    # ---------------------------------------------------------------------

    def create(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        mobile_no: str,
        state: str,
        district: str,
        village: str,
        address: str,
        role: Role = DEFAULT_ROLE,
        request_ip: str | None = None,
    ) -> User:
        """
        Insert a new Identity with a freshly salted password hash.

        Raises ``ValidationError`` for a bad email / short password and
        ``ConflictError`` when the email is already registered.
        """
        normalized = self.validate_email(email)
        self.validate_password(password)
        if role not in (Role.ADMIN, Role.RESIDENT):
            raise ValidationError("Invalid role")

        # Fast path; the unique index below is the real guarantee
        if self.find_by_email(normalized):
            raise ConflictError("Email is already registered")

        password_hash, password_salt = self.hasher.hash_new(password)
        user = User(
            email=normalized,
            password_hash=password_hash,
            password_salt=password_salt,
            full_name=full_name,
            mobile_no=mobile_no,
            state=state,
            district=district,
            village=village,
            address=address,
            role=role.value,
            is_active=True,
        )
        self.db.add(user)
        try:
            self.db.flush()  # get user.id before commit; raises on duplicate email
        except IntegrityError as exc:
            self.db.rollback()
            # Only a row that now holds this email makes it a duplicate;
            # any other constraint failure is a storage fault.
            if self.db.query(User.id).filter(User.email == normalized).first() is None:
                logger.error("Registration insert failed: %s", exc.orig)
                raise
            logger.info("Duplicate registration rejected by unique index: %s", normalized)
            raise ConflictError("Email is already registered")

        self.db.add(AuditLog(
            actor_id=None,
            target_user_id=user.id,
            action="register",
            detail=f"role={role.value}",
            request_ip=request_ip,
        ))
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s role=%s", user.id, user.role)
        return user

    # ---------------------------------------------------------------------
    # Authenticate
    # ---------------------------------------------------------------------

    def authenticate(self, email: str, password: str, request_ip: str | None = None) -> User:
        """
        Return the Identity for valid credentials and stamp ``last_login``.
        Raises ``AuthenticationFailure`` (one uniform message) otherwise.
        """
        if not password:
            raise ValidationError("Password is required")

        user = self.find_by_email(email)
        if user is None:
            self.hasher.verify_decoy(password)
            logger.info("Login failed: unknown email")
            raise AuthenticationFailure(LOGIN_FAIL)

        if not self.hasher.verify_stored(password, user.password_hash, user.password_salt):
            logger.info("Login failed: bad password for user %s", user.id)
            raise AuthenticationFailure(LOGIN_FAIL)

        if not user.is_active:
            logger.info("Login failed: user %s is disabled", user.id)
            raise AuthenticationFailure(LOGIN_FAIL)

        user.last_login = datetime.now(timezone.utc)
        self.db.add(AuditLog(
            actor_id=user.id,
            target_user_id=user.id,
            action="user_login",
            request_ip=request_ip,
        ))
        self.db.commit()
        self.db.refresh(user)
        return user

    # ---------------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------------

    def update_profile(self, user: User, changes: dict) -> User:
        """Apply non-empty values for the whitelisted profile fields."""
        for field in PROFILE_FIELDS:
            value = changes.get(field)
            if value:
                setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user: User, old_password: str, new_password: str) -> None:
        """Re-hash under a brand-new salt after checking the current password."""
        if not self.hasher.verify_stored(old_password, user.password_hash, user.password_salt):
            raise ValidationError("Old password is incorrect")
        self.validate_password(new_password)

        user.password_hash, user.password_salt = self.hasher.hash_new(new_password)
        self.db.add(AuditLog(actor_id=user.id, target_user_id=user.id, action="change_password"))
        self.db.commit()

    def set_active(self, user: User, active: bool, actor_id: int, request_ip: str | None = None) -> None:
        user.is_active = active
        self.db.add(AuditLog(
            actor_id=actor_id,
            target_user_id=user.id,
            action="enable_user" if active else "disable_user",
            request_ip=request_ip,
        ))
        self.db.commit()

    def set_role(self, user: User, role: Role, actor_id: int, request_ip: str | None = None) -> None:
        if role not in (Role.ADMIN, Role.RESIDENT):
            raise ValidationError("Invalid role. Must be 'Admin' or 'Resident'")
        user.role = role.value
        self.db.add(AuditLog(
            actor_id=actor_id,
            target_user_id=user.id,
            action="change_role",
            detail=f"new_role={role.value}",
            request_ip=request_ip,
        ))
        self.db.commit()

    # ---------------------------------------------------------------------
    # Bootstrap
    # ---------------------------------------------------------------------

    def seed_admin(self, email: str, password: str, full_name: str = "Admin User") -> User | None:
        """
        Create the first administrator unless that email already exists.
        Returns the new row, or None when nothing was created.
        """
        if self.find_by_email(email):
            return None
        return self.create(
            email=email,
            password=password,
            full_name=full_name,
            mobile_no="0000000000",
            state="Admin State",
            district="Admin District",
            village="Admin Village",
            address="Village Admin Office",
            role=Role.ADMIN,
        )
