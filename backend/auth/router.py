# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – registration, login, own profile, password change.

Security notes
--------------
* Registration never returns a token; the caller must log in afterwards.
* Login returns the *same* 401 whether the email doesn't exist, the
  password is wrong or the account is disabled (see ``CredentialStore``).
* change-password verifies the old password before accepting the new one,
  so a stolen (but not yet expired) token alone cannot reset the password.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core.config import settings
from core.errors import AuthenticationFailure, NotFoundError
from core.passwords import PasswordHasher
from core.security import (
    get_client_ip,
    get_current_claims,
    get_password_hasher,
    get_token_service,
)
from core.tokens import TokenClaims, TokenService
from auth.store import CredentialStore
from auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    UpdateProfileRequest,
)
from models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_credential_store(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> CredentialStore:
    """Dependency: a CredentialStore bound to this request's session."""
    return CredentialStore(db, hasher, password_min_length=settings.password_min_length)


def get_current_user(
    claims: TokenClaims = Depends(get_current_claims),
    store: CredentialStore = Depends(get_credential_store),
) -> User:
    """
    Dependency: load the row behind a verified token.  A token whose
    identity has since been disabled no longer reaches profile data.
    """
    try:
        user = store.get(claims.subject)
    except NotFoundError:
        raise AuthenticationFailure()
    if not user.is_active:
        raise AuthenticationFailure()
    return user


# ---------------------------------------------------------------------------
# POST /api/auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    """Create a Resident account.  No token is issued here."""
    fields = body.model_dump()
    user = store.create(request_ip=get_client_ip(request), **fields)
    return RegisterResponse(id=user.id)


# ---------------------------------------------------------------------------
# POST /api/auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate and return a signed JWT plus the basic profile claims."""
    user = store.authenticate(body.email, body.password, request_ip=get_client_ip(request))
    token = tokens.issue(user)
    return LoginResponse(
        access_token=token,
        token_type="bearer",
        id=user.id,
        full_name=user.full_name,
        email=user.email,
        role=user.role,
    )


# ---------------------------------------------------------------------------
# GET / PUT /api/auth/profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile (no secrets)."""
    return current_user


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    body: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Update name / contact / address.  Empty values leave a field unchanged."""
    return store.update_profile(current_user, body.model_dump(exclude_none=True))


# ---------------------------------------------------------------------------
# PUT /api/auth/change-password
# ---------------------------------------------------------------------------


@router.put("/change-password")
def change_password(
    body: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Change the authenticated user's password; a new salt is generated."""
    store.change_password(current_user, body.old_password, body.new_password)
    return {"detail": "Password changed successfully"}
