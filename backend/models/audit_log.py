# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""AuditLog ORM model – security-relevant events (sign-ups, logins, admin actions)."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Who performed the action (NULL for anonymous events such as registration)
    actor_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # The user the action was about
    target_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action = Column(String(64), nullable=False, index=True)   # e.g. "user_login"
    detail = Column(Text, nullable=True)
    request_ip = Column(String(45), nullable=True)            # IPv6-sized
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
