# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – identity management and the audit trail.

Every endpoint in this router is guarded by ``require_admin``.  A request
that carries a valid JWT whose role claim is not ``Admin`` receives 403
before any business logic runs.  Identities are never deleted; they are
deactivated instead.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session, aliased

from database import get_db
from core.errors import ValidationError
from core.roles import Role
from core.security import get_client_ip, require_admin
from core.tokens import TokenClaims
from auth.router import get_credential_store
from auth.store import CredentialStore
from models.user import User
from models.audit_log import AuditLog
from admin.schemas import (
    AuditLogListResponse,
    AuditLogRow,
    ChangeRoleRequest,
    UserListResponse,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# GET /api/admin/users  – list all identities
# ---------------------------------------------------------------------------


@router.get("/users", response_model=UserListResponse)
def list_users(
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_credential_store),
):
    """Return every identity (no password data – handled by the schema)."""
    return UserListResponse(users=store.list_all())


# ---------------------------------------------------------------------------
# PUT /api/admin/users/{id}/disable | enable
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/disable")
def disable_user(
    user_id: int,
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Set ``is_active = False``.  The user can no longer log in or read their
    profile.  Guard: an admin cannot disable their own account.
    """
    if user_id == admin.subject:
        raise ValidationError("Cannot disable yourself")

    target = store.get(user_id)
    store.set_active(target, False, actor_id=admin.subject, request_ip=get_client_ip(request))
    return {"detail": "User disabled"}


@router.put("/users/{user_id}/enable")
def enable_user(
    user_id: int,
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_credential_store),
):
    """Set ``is_active = True`` so the user can log in again."""
    target = store.get(user_id)
    store.set_active(target, True, actor_id=admin.subject, request_ip=get_client_ip(request))
    return {"detail": "User enabled"}


# ---------------------------------------------------------------------------
# PUT /api/admin/users/{id}/change-role  – promote or demote a user
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/change-role")
def change_role(
    user_id: int,
    body: ChangeRoleRequest,
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Change the role of an existing user.  Guards:
    * Role value must be 'Admin' or 'Resident'.
    * An admin cannot change their own role (prevents accidental self-lockout).

    Tokens already issued keep their old role claim until they expire.
    """
    role = Role.parse(body.role)
    if role is Role.UNRECOGNIZED:
        raise ValidationError("Invalid role. Must be 'Admin' or 'Resident'")

    if user_id == admin.subject:
        raise ValidationError("Cannot change your own role")

    target = store.get(user_id)
    store.set_role(target, role, actor_id=admin.subject, request_ip=get_client_ip(request))
    return {"detail": "Role updated"}


# ---------------------------------------------------------------------------
# GET /api/admin/audit-logs  – audit trail with optional filters
# ---------------------------------------------------------------------------


@router.get("/audit-logs", response_model=AuditLogListResponse)
def list_audit_logs(
    emails: list[str] | None = Query(None, description="Filter by exact email(s) – repeated param"),
    action: str | None = Query(None, description="Filter by action, e.g. user_login"),
    since: datetime | None = Query(None, description="ISO-8601 start of time window"),
    until: datetime | None = Query(None, description="ISO-8601 end of time window"),
    limit: int = Query(200, ge=1, le=1000),
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Return audit log rows newest-first.  Supports optional filters:

    * ``emails`` – one or more exact email addresses; match rows where
                   *either* actor_id or target_user_id belongs to one of them.
    * ``action`` – exact action name.
    * ``since`` / ``until`` – ISO-8601 bounds on ``created_at``.
    * ``limit`` – max rows returned (default 200, cap 1000).
    """
    Actor  = aliased(User)
    Target = aliased(User)

    q = (
        db.query(AuditLog, Actor.email, Target.email)
        .outerjoin(Actor,  AuditLog.actor_id       == Actor.id)
        .outerjoin(Target, AuditLog.target_user_id == Target.id)
    )

    if emails:
        lowered = [e.strip().lower() for e in emails]
        q = q.filter(Actor.email.in_(lowered) | Target.email.in_(lowered))
    if action:
        q = q.filter(AuditLog.action == action)
    if since:
        q = q.filter(AuditLog.created_at >= since)
    if until:
        q = q.filter(AuditLog.created_at <= until)

    rows = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()

    return AuditLogListResponse(logs=[
        AuditLogRow(
            id=row.id,
            actor_email=actor_email,
            target_email=target_email,
            action=row.action,
            detail=row.detail,
            request_ip=row.request_ip,
            created_at=row.created_at,
        )
        for row, actor_email, target_email in rows
    ])
