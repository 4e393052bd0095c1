from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.exceptions import AuthenticationError
from ..core.store import DataStore
from ..models.user import Role, User
from ..services.assistant import CourseAssistant
from ..services.auth_provider import AuthProvider
from ..services.profile_resolver import resolve_profile

bearer = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DataStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Data store not available on app state.")
    return store


def get_auth(request: Request) -> AuthProvider:
    auth = getattr(request.app.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=500, detail="Auth provider not available on app state.")
    return auth


def get_assistant(request: Request) -> CourseAssistant:
    return request.app.state.assistant


StoreDep = Annotated[DataStore, Depends(get_store)]
AuthDep = Annotated[AuthProvider, Depends(get_auth)]
AssistantDep = Annotated[CourseAssistant, Depends(get_assistant)]
Credentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer)]


async def _resolve(store: DataStore, auth: AuthProvider, token: str) -> User:
    identity = await run_in_threadpool(auth.get_identity, token)
    return await run_in_threadpool(resolve_profile, store, auth, identity, token)


async def optional_user(store: StoreDep, auth: AuthDep, creds: Credentials) -> Optional[User]:
    """Anonymous visitors browse the directory too."""
    if creds is None:
        return None
    try:
        return await _resolve(store, auth, creds.credentials)
    except AuthenticationError:
        # stale or revoked token: browse as a logged-out visitor
        return None


async def current_user(store: StoreDep, auth: AuthDep, creds: Credentials) -> User:
    if creds is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _resolve(store, auth, creds.credentials)


async def current_admin(user: Annotated[User, Depends(current_user)]) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required.")
    return user


async def current_student(user: Annotated[User, Depends(current_user)]) -> User:
    if user.role != Role.STUDENT:
        raise HTTPException(status_code=403, detail="Student access required.")
    return user


OptionalUser = Annotated[Optional[User], Depends(optional_user)]
CurrentUser = Annotated[User, Depends(current_user)]
AdminUser = Annotated[User, Depends(current_admin)]
StudentUser = Annotated[User, Depends(current_student)]
