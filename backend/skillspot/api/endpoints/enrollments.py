from typing import List

from fastapi import APIRouter

from ...models.enrollment import Enrollment, EnrollmentRequest, StatusUpdate, StudentEnrollmentRow
from ...services import enrollments as enrollment_service
from ..deps import AdminUser, StoreDep, StudentUser

router = APIRouter()


@router.post("", response_model=Enrollment, status_code=201)
def apply(body: EnrollmentRequest, store: StoreDep, student: StudentUser):
    return enrollment_service.create_enrollment(store, student, body)


@router.get("/mine", response_model=List[StudentEnrollmentRow])
def my_enrollments(store: StoreDep, student: StudentUser):
    return enrollment_service.list_for_student(store, student)


@router.get("", response_model=List[Enrollment])
def ngo_enrollments(store: StoreDep, admin: AdminUser, status: str = "Pending"):
    """Applications to the admin's NGO; ``status`` is a single status or "All"."""
    return enrollment_service.list_for_admin(store, admin, status)


@router.patch("/{enrollment_id}", response_model=Enrollment)
def set_status(enrollment_id: str, body: StatusUpdate, store: StoreDep, admin: AdminUser):
    return enrollment_service.update_status(store, admin, enrollment_id, body.status)
