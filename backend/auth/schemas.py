# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# -- Requests --------------------------------------------------------------


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    mobile_no: str = Field(..., min_length=1, max_length=15)
    email: str = Field(..., min_length=3, max_length=100)
    state: str = Field(..., min_length=1, max_length=50)
    district: str = Field(..., min_length=1, max_length=50)
    village: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1, max_length=200)
    # Minimum length is a configurable policy, checked by the store
    password: str = Field(..., max_length=100)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=100)


class UpdateProfileRequest(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    mobile_no: Optional[str] = Field(None, max_length=15)
    state: Optional[str] = Field(None, max_length=50)
    district: Optional[str] = Field(None, max_length=50)
    village: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=200)


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


# -- Responses -------------------------------------------------------------


class RegisterResponse(BaseModel):
    id: int
    message: str = "Registration successful!"


class LoginResponse(BaseModel):
    access_token: str
    token_type: str  # always "bearer"
    id: int
    full_name: str
    email: str
    role: str


class ProfileResponse(BaseModel):
    id: int
    full_name: str
    email: str
    mobile_no: str
    state: str
    district: str
    village: str
    address: str
    role: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}
