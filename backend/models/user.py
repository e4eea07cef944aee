# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""User (Identity) ORM model."""

from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime
from sqlalchemy.sql import func

from core.roles import DEFAULT_ROLE, STORED_ROLE_VALUES
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    mobile_no = Column(String(15), nullable=False)
    # Always stored lower-cased (see auth.store.normalize_email), so the unique
    # index enforces case-insensitive uniqueness at the storage layer.
    email = Column(String(100), unique=True, nullable=False, index=True)
    # base64( PBKDF2-HMAC-SHA256 digest ) – never the plaintext
    password_hash = Column(String(255), nullable=False)
    # base64( 16 random bytes ), fresh per user and per password change
    password_salt = Column(String(255), nullable=False)
    state = Column(String(50), nullable=False)
    district = Column(String(50), nullable=False)
    village = Column(String(50), nullable=False)
    address = Column(String(200), nullable=False)
    role = Column(
        Enum(*STORED_ROLE_VALUES, name="user_role"),
        nullable=False,
        default=DEFAULT_ROLE.value,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
