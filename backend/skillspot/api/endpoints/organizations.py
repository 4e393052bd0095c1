from typing import List

from fastapi import APIRouter, Query

from ...models.organization import (
    Course,
    CourseForm,
    CourseView,
    DirectoryFilters,
    NgoRegistration,
    Organization,
    OrganizationDetail,
    OrganizationUpdate,
    Review,
    ReviewForm,
)
from ...services import courses as course_service
from ...services import enrollments as enrollment_service
from ...services import organizations as org_service
from ..deps import AdminUser, AuthDep, OptionalUser, StoreDep, StudentUser

router = APIRouter()


# --------------------------- Directory ---------------------------

@router.get("", response_model=List[Organization])
def list_ngos(
    store: StoreDep,
    q: str = "",
    type_: str = Query(org_service.ALL, alias="type"),
    location: str = org_service.ALL,
):
    return org_service.filter_organizations(org_service.list_organizations(store), q, type_, location)


@router.get("/filters", response_model=DirectoryFilters)
def directory_filters(store: StoreDep):
    types, locations = org_service.directory_filters(org_service.list_organizations(store))
    return DirectoryFilters(types=types, locations=locations)


@router.post("", status_code=201)
def register_ngo(body: NgoRegistration, store: StoreDep, auth: AuthDep):
    """Public "Register your NGO" form: creates the NGO and its admin account."""
    org, admin = org_service.register_organization(store, auth, body)
    return {
        "ngo": org.model_dump(mode="json", by_alias=True),
        "admin": admin.model_dump(mode="json", by_alias=True, exclude_none=True),
    }


@router.get("/{ngo_id}", response_model=OrganizationDetail)
def ngo_detail(ngo_id: str, store: StoreDep, viewer: OptionalUser):
    return enrollment_service.organization_detail(store, ngo_id, viewer)


@router.patch("/{ngo_id}", response_model=Organization)
def update_ngo(ngo_id: str, body: OrganizationUpdate, store: StoreDep, admin: AdminUser):
    return org_service.update_organization(store, admin, ngo_id, body)


@router.delete("/{ngo_id}", status_code=204)
def delete_ngo(ngo_id: str, store: StoreDep, admin: AdminUser):
    org_service.delete_organization(store, admin, ngo_id)


# --------------------------- Courses ---------------------------

@router.get("/{ngo_id}/courses/{course_id}", response_model=CourseView)
def course_detail(ngo_id: str, course_id: str, store: StoreDep, viewer: OptionalUser):
    org = org_service.get_organization(store, ngo_id)
    course = org_service.find_course(org, course_id)
    enrollment = None
    if viewer is not None:
        enrollment = enrollment_service.find_enrollment(store, viewer.id, course_id)
    return enrollment_service.course_view(course, viewer, enrollment)


@router.post("/{ngo_id}/courses", response_model=Course, status_code=201)
def add_course(ngo_id: str, body: CourseForm, store: StoreDep, admin: AdminUser):
    return course_service.add_course(store, admin, ngo_id, body)


@router.put("/{ngo_id}/courses/{course_id}", response_model=Course)
def edit_course(ngo_id: str, course_id: str, body: CourseForm, store: StoreDep, admin: AdminUser):
    return course_service.edit_course(store, admin, ngo_id, course_id, body)


@router.delete("/{ngo_id}/courses/{course_id}", status_code=204)
def delete_course(ngo_id: str, course_id: str, store: StoreDep, admin: AdminUser):
    course_service.delete_course(store, admin, ngo_id, course_id)


@router.post("/{ngo_id}/courses/{course_id}/reviews", response_model=Review, status_code=201)
def add_review(ngo_id: str, course_id: str, body: ReviewForm, store: StoreDep, student: StudentUser):
    return course_service.add_review(store, student, ngo_id, course_id, body)
