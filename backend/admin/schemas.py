# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Bodies accepted and returned by /api/admin."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., description="Admin or Resident; parsed with Role.parse")


class UserRow(BaseModel):
    """One Identity as shown on the admin user list (no credential columns)."""

    id: int
    full_name: str
    email: str
    mobile_no: str
    village: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    users: List[UserRow]


class AuditLogRow(BaseModel):
    """
    An audit entry with both user references shown as emails.

    ``actor_email`` is None for self-registration; ``target_email`` is None
    for announcement actions, which carry the announcement id in ``detail``.
    """

    id: int
    actor_email: Optional[str] = None
    target_email: Optional[str] = None
    action: str
    detail: Optional[str] = None
    request_ip: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogRow]
