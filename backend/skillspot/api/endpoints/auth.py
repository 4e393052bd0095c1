import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from ...core.exceptions import DataServiceError, ValidationError
from ...core.store import USERS
from ...models.user import LoginRequest, RegisterRequest, Role, SessionResponse, User
from ...services.auth_provider import discard_identity
from ...services.profile_resolver import resolve_profile
from ..deps import AuthDep, Credentials, CurrentUser, StoreDep

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=SessionResponse, status_code=201)
def register(body: RegisterRequest, store: StoreDep, auth: AuthDep):
    """Email/password sign-up; every self-registered account is a student."""
    if not body.name.strip() or not body.email.strip() or not body.password:
        raise ValidationError("All fields are required for registration.")

    session = auth.sign_up(body.email, body.password, {"full_name": body.name.strip()})
    user = User(
        id=session.identity.id,
        name=body.name.strip(),
        email=session.identity.email or body.email.strip().lower(),
        phone=body.phone or None,
        role=Role.STUDENT,
    )
    try:
        store.insert(USERS, user.to_row())
    except DataServiceError:
        discard_identity(auth, session.identity.id)
        raise
    logger.info("[auth] registered student %s", user.email)
    return SessionResponse(access_token=session.access_token, user=user)


@router.post("/login", response_model=SessionResponse)
def login(body: LoginRequest, store: StoreDep, auth: AuthDep):
    session = auth.sign_in(body.email, body.password)
    user = resolve_profile(store, auth, session.identity, session.access_token)
    return SessionResponse(access_token=session.access_token, user=user)


@router.get("/oauth/{provider}")
def oauth_start(provider: str, auth: AuthDep, redirect_to: Optional[str] = None):
    """URL the frontend sends the browser to for external-provider sign-in."""
    return {"url": auth.oauth_url(provider, redirect_to)}


@router.get("/me", response_model=User)
def me(user: CurrentUser):
    return user


@router.post("/logout", status_code=204)
def logout(auth: AuthDep, creds: Credentials):
    if creds is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    auth.sign_out(creds.credentials)
