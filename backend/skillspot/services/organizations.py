from __future__ import annotations

import logging
import re
from typing import List, Optional

from rapidfuzz import fuzz

from ..core.exceptions import (
    ConflictError,
    DataServiceError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..core.store import ENROLLMENTS, NGOS, USERS, DataStore
from ..models.organization import Contact, NgoRegistration, Organization, OrganizationUpdate
from ..models.user import Role, User
from .auth_provider import AuthProvider, discard_identity
from .seed_data import LOCATIONS, NGO_TYPES

logger = logging.getLogger(__name__)

ALL = "All"

# Minimum rapidfuzz partial ratio for a name to count as a search hit
FUZZY_NAME_THRESHOLD = 85
# Queries shorter than this only match by substring
FUZZY_MIN_QUERY_LEN = 4


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def matches_search(org: Organization, query: str) -> bool:
    q = (query or "").strip().lower()
    if not q:
        return True
    name = org.name.lower()
    if q in name or q in org.description.lower():
        return True
    return len(q) >= FUZZY_MIN_QUERY_LEN and fuzz.partial_ratio(q, name) >= FUZZY_NAME_THRESHOLD


def filter_organizations(orgs: List[Organization], query: str = "", type_: str = ALL,
                         location: str = ALL) -> List[Organization]:
    out = []
    for org in orgs:
        if not matches_search(org, query):
            continue
        if type_ and type_ != ALL and org.type != type_:
            continue
        if location and location != ALL and location.lower() not in org.location.lower():
            continue
        out.append(org)
    return out


def list_organizations(store: DataStore) -> List[Organization]:
    return [Organization.model_validate(r) for r in store.select(NGOS)]


def get_organization(store: DataStore, ngo_id: str) -> Organization:
    row = store.select_one(NGOS, id=ngo_id)
    if not row:
        raise NotFoundError("NGO", ngo_id)
    return Organization.model_validate(row)


def directory_filters(orgs: List[Organization]) -> tuple[List[str], List[str]]:
    """Type and location dropdown options, 'All' first, constants before stored values."""
    types = list(NGO_TYPES)
    locations = list(LOCATIONS)
    for org in orgs:
        if org.type and org.type not in types:
            types.append(org.type)
        if org.location and org.location not in locations:
            locations.append(org.location)
    return types, locations


def register_organization(store: DataStore, auth: AuthProvider, form: NgoRegistration) -> tuple[Organization, User]:
    """Create an NGO together with the admin account that manages it."""
    values = form.model_dump()
    if any(not str(v).strip() for v in values.values()):
        raise ValidationError("All fields, including the logo, are required.")

    ngo_id = slugify(form.ngo_name)
    if store.select_one(NGOS, id=ngo_id):
        raise ConflictError(f"An NGO named '{form.ngo_name}' is already registered.")

    session = auth.sign_up(
        form.contact_email,
        form.password,
        {"full_name": f"{form.ngo_name} Admin", "role": Role.ADMIN.value},
    )

    org = Organization(
        id=ngo_id,
        name=form.ngo_name.strip(),
        contact=Contact(email=form.contact_email.strip(), person="Admin", website=form.website.strip()),
        courses=[],
        logo_url=form.logo_data_url,
        banner_url=f"https://picsum.photos/seed/{ngo_id}-banner/1200/400",
        location=form.location.strip(),
        category="General",
        type=form.type,
        description=form.description.strip(),
        mission_statement=form.mission_statement.strip(),
    )
    admin = User(
        id=session.identity.id,
        name=f"{org.name} Admin",
        email=session.identity.email or form.contact_email.strip().lower(),
        role=Role.ADMIN,
        ngo_id=ngo_id,
    )
    try:
        store.insert(NGOS, org.to_row())
    except DataServiceError:
        discard_identity(auth, admin.id)
        raise
    try:
        store.insert(USERS, admin.to_row())
    except DataServiceError:
        _discard_organization(store, ngo_id)
        discard_identity(auth, admin.id)
        raise
    logger.info("[ngo] registered %s with admin %s", ngo_id, admin.email)
    return org, admin


def _discard_organization(store: DataStore, ngo_id: str) -> None:
    try:
        store.delete(NGOS, id=ngo_id)
    except DataServiceError as e:
        logger.error("[ngo] could not remove half-registered %s: %s", ngo_id, e.message)


def require_ngo_admin(user: User, ngo_id: str) -> None:
    if user.role != Role.ADMIN or user.ngo_id != ngo_id:
        raise PermissionDeniedError("Only an administrator of this NGO can do that.")


def update_organization(store: DataStore, user: User, ngo_id: str, changes: OrganizationUpdate) -> Organization:
    require_ngo_admin(user, ngo_id)
    get_organization(store, ngo_id)
    values = changes.model_dump(mode="json", by_alias=True, exclude_none=True)
    if "name" in values and not values["name"].strip():
        raise ValidationError("NGO name cannot be empty.")
    if not values:
        return get_organization(store, ngo_id)
    rows = store.update(NGOS, values, id=ngo_id)
    if not rows:
        # Supabase returns nothing when RLS filters the row out
        return get_organization(store, ngo_id)
    return Organization.model_validate(rows[0])


def delete_organization(store: DataStore, user: User, ngo_id: str) -> None:
    require_ngo_admin(user, ngo_id)
    get_organization(store, ngo_id)
    removed = store.delete(ENROLLMENTS, ngoId=ngo_id)
    store.delete(NGOS, id=ngo_id)
    logger.info("[ngo] deleted %s and %d enrollment(s)", ngo_id, len(removed))


def find_course(org: Organization, course_id: str):
    for course in org.courses:
        if course.id == course_id:
            return course
    raise NotFoundError("Course", course_id)


def admin_organization(store: DataStore, user: User) -> Optional[Organization]:
    if user.role != Role.ADMIN or not user.ngo_id:
        return None
    row = store.select_one(NGOS, id=user.ngo_id)
    return Organization.model_validate(row) if row else None
