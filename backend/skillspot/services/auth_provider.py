"""Authentication providers.

Supabase Auth (GoTrue) handles email/password and external-provider sign-in
in production. Local mode keeps bcrypt-hashed identities next to the other
collections and issues its own HS256 tokens.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import bcrypt
from jose import JWTError, jwt
from supabase import Client

from ..core.config import Settings
from ..core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    SkillSpotError,
    ValidationError,
    error_message,
    translate_backend_error,
)
from ..core.store import IDENTITIES, LocalStore

logger = logging.getLogger(__name__)

EMAIL_PROVIDER = "email"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class Identity:
    """The authenticated principal, before it is mapped to a profile."""

    id: str
    email: Optional[str]
    provider: str = EMAIL_PROVIDER
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_external(self) -> bool:
        return bool(self.provider) and self.provider != EMAIL_PROVIDER


@dataclass
class AuthSession:
    access_token: Optional[str]
    identity: Identity


def validate_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address.")
    return email


class AuthProvider:
    """Operations the API needs from an identity provider."""

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthSession:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> AuthSession:
        raise NotImplementedError

    def oauth_url(self, provider: str, redirect_to: Optional[str] = None) -> str:
        raise NotImplementedError

    def get_identity(self, token: str) -> Identity:
        raise NotImplementedError

    def sign_out(self, token: str) -> None:
        raise NotImplementedError

    def delete_identity(self, identity_id: str) -> None:
        """Remove an identity whose profile could not be written."""
        raise NotImplementedError


def discard_identity(auth: AuthProvider, identity_id: str) -> None:
    """Undo a sign-up whose profile rows failed; the original error stays the one reported."""
    try:
        auth.delete_identity(identity_id)
    except SkillSpotError as e:
        logger.error("[auth] could not remove orphaned identity %s: %s", identity_id, e.message)
    else:
        logger.info("[auth] removed orphaned identity %s", identity_id)


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

def _identity_from_supabase(user: Any) -> Identity:
    app_meta = getattr(user, "app_metadata", None) or {}
    user_meta = getattr(user, "user_metadata", None) or {}
    return Identity(
        id=str(user.id),
        email=getattr(user, "email", None) or None,
        provider=app_meta.get("provider") or EMAIL_PROVIDER,
        metadata=dict(user_meta),
    )


def _auth_failure(err: Exception, action: str) -> Exception:
    detail = error_message(err)
    low = detail.lower()
    if "invalid login credentials" in low:
        return AuthenticationError("Invalid email or password.")
    if "already registered" in low or "already been registered" in low:
        return ConflictError("A user with this email already exists.")
    translated = translate_backend_error(detail)
    if translated != detail:
        return ConfigurationError(translated)
    return AuthenticationError(f"{action} failed: {detail}")


class SupabaseAuthProvider(AuthProvider):
    """GoTrue-backed provider.

    Sign-in and sign-up run on a throwaway client from ``client_factory`` so
    the user's session never leaks into the shared service client.
    """

    def __init__(self, client: Client, client_factory: Callable[[], Client]):
        self.client = client
        self.client_factory = client_factory

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthSession:
        email = validate_email(email)
        try:
            resp = self.client_factory().auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata or {}}}
            )
        except Exception as e:
            logger.error("[auth] sign_up failed for %s: %r", email, e)
            raise _auth_failure(e, "Sign-up") from e
        if resp.user is None:
            raise AuthenticationError("Sign-up did not return a user.")
        token = resp.session.access_token if resp.session else None
        return AuthSession(access_token=token, identity=_identity_from_supabase(resp.user))

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            resp = self.client_factory().auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("[auth] sign_in failed for %s: %r", email, e)
            raise _auth_failure(e, "Sign-in") from e
        if resp.session is None or resp.user is None:
            raise AuthenticationError("Invalid email or password.")
        return AuthSession(access_token=resp.session.access_token, identity=_identity_from_supabase(resp.user))

    def oauth_url(self, provider: str, redirect_to: Optional[str] = None) -> str:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            resp = self.client_factory().auth.sign_in_with_oauth({"provider": provider, "options": options})
        except Exception as e:
            logger.error("[auth] oauth url for %s failed: %r", provider, e)
            raise _auth_failure(e, "OAuth sign-in") from e
        return resp.url

    def get_identity(self, token: str) -> Identity:
        try:
            resp = self.client.auth.get_user(token)
        except Exception as e:
            logger.info("[auth] token rejected: %r", e)
            raise AuthenticationError("Session is invalid or has expired.") from e
        if resp is None or resp.user is None:
            raise AuthenticationError("Session is invalid or has expired.")
        return _identity_from_supabase(resp.user)

    def sign_out(self, token: str) -> None:
        try:
            self.client.auth.admin.sign_out(token)
        except Exception as e:
            # already-revoked tokens end up here too
            logger.warning("[auth] sign_out failed: %r", e)

    def delete_identity(self, identity_id: str) -> None:
        try:
            self.client.auth.admin.delete_user(identity_id)
        except Exception as e:
            logger.error("[auth] delete_user %s failed: %r", identity_id, e)
            raise _auth_failure(e, "Removing the account") from e


# ---------------------------------------------------------------------------
# Local mode
# ---------------------------------------------------------------------------

BCRYPT_ROUNDS = 12
JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        return False


class LocalAuthProvider(AuthProvider):
    """Email/password identities stored in the local JSON store."""

    def __init__(self, store: LocalStore, secret_key: str, expire_minutes: int = 60 * 24 * 7):
        self.store = store
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes

    def _issue(self, identity: Identity) -> str:
        now = time.time()
        claims = {
            "sub": identity.id,
            "email": identity.email,
            "provider": identity.provider,
            "iat": now,
            "exp": now + self.expire_minutes * 60,
        }
        return jwt.encode(claims, self.secret_key, algorithm=JWT_ALGORITHM)

    @staticmethod
    def _identity(row: Dict[str, Any]) -> Identity:
        return Identity(
            id=row["id"],
            email=row.get("email"),
            provider=row.get("provider") or EMAIL_PROVIDER,
            metadata=row.get("metadata") or {},
        )

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthSession:
        email = validate_email(email)
        if not password:
            raise ValidationError("Password is required.")
        if self.store.select(IDENTITIES, email=email):
            raise ConflictError("A user with this email already exists.")
        row = {
            "id": str(uuid.uuid4()),
            "email": email,
            "provider": EMAIL_PROVIDER,
            "passwordHash": hash_password(password),
            "metadata": metadata or {},
            "validAfter": 0,
        }
        self.store.insert(IDENTITIES, row)
        identity = self._identity(row)
        return AuthSession(access_token=self._issue(identity), identity=identity)

    def sign_in(self, email: str, password: str) -> AuthSession:
        row = self.store.select_one(IDENTITIES, email=(email or "").strip().lower())
        if not row or not verify_password(password or "", row.get("passwordHash", "")):
            raise AuthenticationError("Invalid email or password.")
        identity = self._identity(row)
        return AuthSession(access_token=self._issue(identity), identity=identity)

    def oauth_url(self, provider: str, redirect_to: Optional[str] = None) -> str:
        raise ConfigurationError(translate_backend_error(f"Unsupported provider: provider is not enabled ({provider})"))

    def get_identity(self, token: str) -> Identity:
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[JWT_ALGORITHM])
        except JWTError as e:
            raise AuthenticationError("Session is invalid or has expired.") from e
        row = self.store.select_one(IDENTITIES, id=claims.get("sub"))
        if not row or float(claims.get("iat", 0)) <= float(row.get("validAfter", 0)):
            raise AuthenticationError("Session is invalid or has expired.")
        return self._identity(row)

    def sign_out(self, token: str) -> None:
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return
        # Global sign-out: every token issued before now stops working
        self.store.update(IDENTITIES, {"validAfter": time.time()}, id=claims.get("sub"))

    def delete_identity(self, identity_id: str) -> None:
        self.store.delete(IDENTITIES, id=identity_id)


def build_auth_provider(settings: Settings, store, client: Client | None = None,
                        client_factory: Callable[[], Client] | None = None) -> AuthProvider:
    if isinstance(store, LocalStore):
        return LocalAuthProvider(store, settings.JWT_SECRET_KEY, settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    if client is None or client_factory is None:
        raise ConfigurationError("Supabase auth needs a client and a client factory.")
    return SupabaseAuthProvider(client, client_factory)
