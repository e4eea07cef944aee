# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Announcement endpoints.

* Listing is public and shows only published, unexpired announcements.
* Reading a single unpublished announcement requires an Admin token.
* Create / update / delete are guarded by ``require_admin``.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from core.errors import AuthenticationFailure, AuthorizationFailure, NotFoundError
from core.logger import logger
from core.security import get_client_ip, get_optional_claims, require_admin
from core.tokens import TokenClaims
from models.announcement import Announcement
from models.audit_log import AuditLog
from announcements.schemas import (
    AnnouncementCreate,
    AnnouncementListResponse,
    AnnouncementResponse,
    AnnouncementUpdate,
)

router = APIRouter(prefix="/api/announcements", tags=["announcements"])


def _utc(value: datetime | None) -> datetime | None:
    """Store every timestamp as UTC; naive input is taken to be UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _to_response(item: Announcement) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=item.id,
        title=item.title,
        content=item.content,
        category=item.category,
        is_published=item.is_published,
        created_at=item.created_at,
        expires_at=item.expires_at,
        published_by=item.publisher.full_name if item.publisher else "Unknown",
    )


def _load(announcement_id: int, db: Session) -> Announcement:
    item = db.query(Announcement).filter(Announcement.id == announcement_id).first()
    if not item:
        raise NotFoundError("Announcement not found")
    return item


# ---------------------------------------------------------------------------
# GET /api/announcements  – public feed
# ---------------------------------------------------------------------------


@router.get("", response_model=AnnouncementListResponse)
def list_announcements(db: Session = Depends(get_db)):
    now = _utc(datetime.now(timezone.utc))
    items = (
        db.query(Announcement)
        .filter(Announcement.is_published.is_(True))
        .filter(or_(Announcement.expires_at.is_(None), Announcement.expires_at > now))
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .all()
    )
    return AnnouncementListResponse(announcements=[_to_response(i) for i in items])


# ---------------------------------------------------------------------------
# GET /api/announcements/{id}
# ---------------------------------------------------------------------------


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
def get_announcement(
    announcement_id: int,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    item = _load(announcement_id, db)
    if not item.is_published:
        if claims is None:
            raise AuthenticationFailure("Not authenticated")
        if not claims.is_admin:
            raise AuthorizationFailure()
    return _to_response(item)


# ---------------------------------------------------------------------------
# POST / PUT / DELETE  – admin only
# ---------------------------------------------------------------------------


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
def create_announcement(
    body: AnnouncementCreate,
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    item = Announcement(
        user_id=admin.subject,
        title=body.title,
        content=body.content,
        category=body.category,
        is_published=body.is_published,
        expires_at=_utc(body.expires_at),
    )
    db.add(item)
    db.flush()
    db.add(AuditLog(
        actor_id=admin.subject,
        action="create_announcement",
        detail=f"announcement_id={item.id}",
        request_ip=get_client_ip(request),
    ))
    db.commit()
    db.refresh(item)
    logger.info("Announcement %s created by user %s", item.id, admin.subject)
    return _to_response(item)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    body: AnnouncementUpdate,
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Fields left out of the body keep their current value."""
    item = _load(announcement_id, db)
    changes = body.model_dump(exclude_unset=True)
    if "expires_at" in changes:
        changes["expires_at"] = _utc(changes["expires_at"])
    for field, value in changes.items():
        if value is None and field != "expires_at":
            continue
        setattr(item, field, value)
    db.add(AuditLog(
        actor_id=admin.subject,
        action="update_announcement",
        detail=f"announcement_id={item.id}",
        request_ip=get_client_ip(request),
    ))
    db.commit()
    db.refresh(item)
    return _to_response(item)


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: int,
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    item = _load(announcement_id, db)
    db.delete(item)
    db.add(AuditLog(
        actor_id=admin.subject,
        action="delete_announcement",
        detail=f"announcement_id={announcement_id}",
        request_ip=get_client_ip(request),
    ))
    db.commit()
    return {"detail": "Announcement deleted"}
