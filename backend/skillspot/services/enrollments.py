from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..core.exceptions import (
    ConflictError,
    DataServiceError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..core.store import ENROLLMENTS, NGOS, NOTIFICATIONS, USERS, DataStore
from ..models.enrollment import Enrollment, EnrollmentRequest, EnrollmentStatus, StudentEnrollmentRow
from ..models.notification import Notification
from ..models.organization import Course, CourseView, Organization, OrganizationDetail
from ..models.user import Role, User
from .courses import average_rating
from .organizations import find_course, get_organization, require_ngo_admin

logger = logging.getLogger(__name__)

REGISTER_LABEL = "Register Now"
WAITLIST_LABEL = "Join Waitlist"
ADMIN_LINK = "/admin-dashboard"
STUDENT_LINK = "/student-dashboard"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Course view state
# ---------------------------------------------------------------------------

def is_waitlisted(course: Course) -> bool:
    return course.seats_available <= 0


def action_label(course: Course) -> str:
    return WAITLIST_LABEL if is_waitlisted(course) else REGISTER_LABEL


def seats_label(course: Course) -> str:
    return "Waitlist Open" if is_waitlisted(course) else f"{course.seats_available} Seats Available"


def find_enrollment(store: DataStore, student_id: str, course_id: str) -> Optional[Enrollment]:
    row = store.select_one(ENROLLMENTS, studentId=student_id, courseId=course_id)
    return Enrollment.model_validate(row) if row else None


def course_view(course: Course, viewer: Optional[User], enrollment: Optional[Enrollment]) -> CourseView:
    disabled = bool(viewer and (viewer.role == Role.ADMIN or enrollment is not None))
    return CourseView(
        **course.model_dump(),
        average_rating=average_rating(course),
        action_label=action_label(course),
        seats_label=seats_label(course),
        enrollment_status=enrollment.status.value if enrollment else None,
        registration_disabled=disabled,
    )


def organization_detail(store: DataStore, ngo_id: str, viewer: Optional[User]) -> OrganizationDetail:
    org = get_organization(store, ngo_id)
    mine: Dict[str, Enrollment] = {}
    if viewer is not None and viewer.role == Role.STUDENT:
        for row in store.select(ENROLLMENTS, studentId=viewer.id, ngoId=ngo_id):
            e = Enrollment.model_validate(row)
            mine[e.course_id] = e
    data = org.model_dump(exclude={"courses"})
    return OrganizationDetail(
        **data,
        courses=[course_view(c, viewer, mine.get(c.id)) for c in org.courses],
    )


# ---------------------------------------------------------------------------
# Enrollment creation and fan-out
# ---------------------------------------------------------------------------

def notify_admins(store: DataStore, org: Organization, message: str) -> List[Notification]:
    """One notification per admin of ``org``; failed inserts are logged and skipped."""
    admins = store.select(USERS, role=Role.ADMIN.value, ngoId=org.id)
    created: List[Notification] = []
    for admin in admins:
        note = Notification(user_id=admin["id"], message=message, link=ADMIN_LINK, is_read=False, created_at=_now())
        try:
            rows = store.insert(NOTIFICATIONS, note.to_row())
        except DataServiceError as e:
            logger.error("[enroll] Failed to create notification for admin %s: %s", admin.get("id"), e.message)
            continue
        created.append(Notification.model_validate(rows[0]) if rows else note)
    return created


def create_enrollment(store: DataStore, student: User, req: EnrollmentRequest) -> Enrollment:
    if student.role != Role.STUDENT:
        raise PermissionDeniedError("Only students can register for courses.")

    org = get_organization(store, req.ngo_id)
    course = find_course(org, req.course_id)

    if find_enrollment(store, student.id, course.id):
        raise ConflictError(f"You have already applied to \"{course.name}\".")

    enrollment = Enrollment(
        student_id=student.id,
        student_name=student.name,
        course_id=course.id,
        course_name=course.name,
        ngo_id=org.id,
        status=EnrollmentStatus.PENDING,
        request_date=_now(),
        previous_experience=req.previous_experience,
        reason_for_joining=req.reason_for_joining,
    )
    rows = store.insert(ENROLLMENTS, enrollment.to_row())
    created = Enrollment.model_validate(rows[0]) if rows else enrollment
    logger.info("[enroll] %s requested %s (%s)", student.email, course.id, created.enrollment_id)

    try:
        notify_admins(store, org, f"{student.name} requested to enroll in {course.name}.")
    except DataServiceError as e:
        # admin lookup failed; the enrollment itself stands
        logger.error("[enroll] admin lookup for %s failed: %s", org.id, e.message)
    return created


# ---------------------------------------------------------------------------
# Review by admins
# ---------------------------------------------------------------------------

def get_enrollment(store: DataStore, enrollment_id: str) -> Enrollment:
    row = store.select_one(ENROLLMENTS, enrollmentId=enrollment_id)
    if not row:
        raise NotFoundError("Enrollment", enrollment_id)
    return Enrollment.model_validate(row)


def update_status(store: DataStore, admin: User, enrollment_id: str, status: EnrollmentStatus) -> Enrollment:
    enrollment = get_enrollment(store, enrollment_id)
    require_ngo_admin(admin, enrollment.ngo_id)

    rows = store.update(ENROLLMENTS, {"status": status.value}, enrollmentId=enrollment_id)
    updated = Enrollment.model_validate(rows[0]) if rows else enrollment.model_copy(update={"status": status})

    note = Notification(
        user_id=enrollment.student_id,
        message=f'Your enrollment for "{enrollment.course_name}" has been {status.value}.',
        link=STUDENT_LINK,
        is_read=False,
        created_at=_now(),
    )
    store.insert(NOTIFICATIONS, note.to_row())
    logger.info("[enroll] %s set %s to %s", admin.email, enrollment_id, status.value)
    return updated


def list_for_admin(store: DataStore, admin: User, status: str = EnrollmentStatus.PENDING.value) -> List[Enrollment]:
    if admin.role != Role.ADMIN or not admin.ngo_id:
        raise PermissionDeniedError("Only NGO administrators can review enrollments.")
    filters = {"ngoId": admin.ngo_id}
    if status and status != "All":
        try:
            filters["status"] = EnrollmentStatus(status).value
        except ValueError as e:
            raise ValidationError(f"Unknown enrollment status '{status}'.") from e
    rows = store.select(ENROLLMENTS, **filters)
    items = [Enrollment.model_validate(r) for r in rows]
    return sorted(items, key=lambda e: e.request_date, reverse=True)


def list_for_student(store: DataStore, student: User) -> List[StudentEnrollmentRow]:
    """The student's enrollments joined with course and NGO names; stale rows are skipped."""
    rows = store.select(ENROLLMENTS, studentId=student.id)
    if not rows:
        return []
    orgs = {r["id"]: Organization.model_validate(r) for r in store.select(NGOS)}
    out: List[StudentEnrollmentRow] = []
    for row in rows:
        e = Enrollment.model_validate(row)
        org = orgs.get(e.ngo_id)
        course = next((c for c in org.courses if c.id == e.course_id), None) if org else None
        if org is None or course is None:
            continue
        out.append(StudentEnrollmentRow(
            enrollment_id=e.enrollment_id or "",
            course_id=course.id,
            course_name=course.name,
            ngo_id=org.id,
            ngo_name=org.name,
            status=e.status,
            request_date=e.request_date,
        ))
    return sorted(out, key=lambda r: r.request_date, reverse=True)
