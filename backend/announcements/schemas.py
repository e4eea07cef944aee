# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the announcement endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# -- Requests --------------------------------------------------------------


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=1000)
    category: str = Field(..., min_length=1, max_length=50)
    is_published: bool = True
    expires_at: Optional[datetime] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    is_published: Optional[bool] = None
    expires_at: Optional[datetime] = None


# -- Responses -------------------------------------------------------------


class AnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    category: str
    is_published: bool
    created_at: datetime
    expires_at: Optional[datetime] = None
    published_by: str


class AnnouncementListResponse(BaseModel):
    announcements: List[AnnouncementResponse]
