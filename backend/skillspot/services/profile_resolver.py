"""Map an authenticated identity to its SkillSpot profile row.

Four outcomes: the profile exists; a first-time external sign-in gets a
default student profile; an external sign-in without an email, or an
email/password identity without a profile, is signed out.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import (
    RLS_USER_INSERT_MESSAGE,
    AuthenticationError,
    ConfigurationError,
    DataServiceError,
)
from ..core.store import USERS, DataStore
from ..models.user import Role, User
from .auth_provider import AuthProvider, Identity

logger = logging.getLogger(__name__)


def default_display_name(identity: Identity) -> str:
    full_name = (identity.metadata or {}).get("full_name") or (identity.metadata or {}).get("name")
    if full_name:
        return str(full_name)
    local_part = (identity.email or "").split("@")[0]
    return local_part or "New User"


def resolve_profile(store: DataStore, auth: AuthProvider, identity: Identity,
                    token: Optional[str] = None) -> User:
    try:
        row = store.select_one(USERS, id=identity.id)
    except DataServiceError:
        logger.exception("[profile] lookup failed for %s", identity.id)
        raise

    if row:
        return User.model_validate(row)

    if identity.is_external:
        if not identity.email:
            logger.error("[profile] OAuth user %s is missing an email. Cannot create profile.", identity.id)
            _force_sign_out(auth, token)
            raise AuthenticationError(
                "Your sign-in provider did not share an email address, so no profile could be created."
            )

        profile = User(
            id=identity.id,
            email=identity.email,
            name=default_display_name(identity),
            role=Role.STUDENT,
        )
        try:
            store.insert(USERS, profile.to_row())
        except DataServiceError as e:
            # a concurrent request for the same identity may have won the insert
            row = store.select_one(USERS, id=identity.id)
            if row:
                logger.info("[profile] profile for %s created by a concurrent request", identity.id)
                return User.model_validate(row)
            logger.error("[profile] creating profile for OAuth user %s failed: %s", identity.id, e.message)
            _force_sign_out(auth, token)
            raise ConfigurationError(RLS_USER_INSERT_MESSAGE) from e
        logger.info("[profile] created student profile for %s (%s)", identity.email, identity.provider)
        return profile

    logger.warning("[profile] User with email %s signed in but has no profile. Logging out.", identity.email)
    _force_sign_out(auth, token)
    raise AuthenticationError("No profile exists for this account. Please register or contact an administrator.")


def _force_sign_out(auth: AuthProvider, token: Optional[str]) -> None:
    if token:
        auth.sign_out(token)
