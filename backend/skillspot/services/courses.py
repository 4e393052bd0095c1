"""Course and review mutation.

Courses live inside their organization's row as one list, and reviews live
inside their course. Every change reads the organization, rebuilds the whole
course list and writes it back in a single update, so two admins editing
the same NGO at once race and the last write wins.
"""

from __future__ import annotations

import logging
import re
import time
from datetime import date, datetime, timezone
from typing import List, Optional

from ..core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from ..core.store import NGOS, DataStore
from ..models.organization import Course, CourseForm, Organization, Review, ReviewForm
from ..models.user import Role, User
from .organizations import find_course, get_organization, require_ngo_admin

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _millis() -> int:
    return int(time.time() * 1000)


def parse_seats(raw) -> int:
    """Form seats are free text; the leading integer counts, anything else is zero."""
    m = _LEADING_INT.match(str(raw) if raw is not None else "")
    if not m:
        return 0
    seats = int(m.group(1))
    if seats < 0:
        raise ValidationError("Seats available cannot be negative.")
    return seats


def build_course(form: CourseForm, existing: Optional[Course] = None) -> Course:
    if not form.name.strip() or not form.category.strip() or not form.start_date.strip():
        raise ValidationError("Name, Category, and Start Date are required.")
    start = form.start_date.split("T")[0]
    try:
        date.fromisoformat(start)
    except ValueError as e:
        raise ValidationError(f"Start Date '{form.start_date}' is not a valid date (YYYY-MM-DD).") from e
    return Course(
        id=existing.id if existing else f"course-{_millis()}",
        name=form.name.strip(),
        description=form.description.strip(),
        category=form.category.strip(),
        duration=form.duration.strip(),
        trainer=form.trainer.strip(),
        seats_available=parse_seats(form.seats_available),
        start_date=start,
        reviews=existing.reviews if existing else [],
    )


def _save_courses(store: DataStore, org: Organization, courses: List[Course]) -> Organization:
    payload = [c.model_dump(mode="json", by_alias=True, exclude_none=True) for c in courses]
    store.update(NGOS, {"courses": payload}, id=org.id)
    return org.model_copy(update={"courses": courses})


def add_course(store: DataStore, user: User, ngo_id: str, form: CourseForm) -> Course:
    require_ngo_admin(user, ngo_id)
    org = get_organization(store, ngo_id)
    course = build_course(form)
    _save_courses(store, org, [*org.courses, course])
    logger.info("[courses] %s added %s to %s", user.email, course.id, ngo_id)
    return course


def edit_course(store: DataStore, user: User, ngo_id: str, course_id: str, form: CourseForm) -> Course:
    require_ngo_admin(user, ngo_id)
    org = get_organization(store, ngo_id)
    current = find_course(org, course_id)
    course = build_course(form, existing=current)
    _save_courses(store, org, [course if c.id == course_id else c for c in org.courses])
    logger.info("[courses] %s edited %s in %s", user.email, course_id, ngo_id)
    return course


def delete_course(store: DataStore, user: User, ngo_id: str, course_id: str) -> None:
    require_ngo_admin(user, ngo_id)
    org = get_organization(store, ngo_id)
    find_course(org, course_id)
    _save_courses(store, org, [c for c in org.courses if c.id != course_id])
    logger.info("[courses] %s deleted %s from %s", user.email, course_id, ngo_id)


def average_rating(course: Course) -> Optional[float]:
    if not course.reviews:
        return None
    return sum(r.rating for r in course.reviews) / len(course.reviews)


def add_review(store: DataStore, user: User, ngo_id: str, course_id: str, form: ReviewForm) -> Review:
    if user.role != Role.STUDENT:
        raise PermissionDeniedError("Only students can review courses.")
    if not 1 <= form.rating <= 5:
        raise ValidationError("Rating must be between 1 and 5.")

    org = get_organization(store, ngo_id)
    course = find_course(org, course_id)
    if any(r.student_id == user.id for r in course.reviews):
        raise ConflictError("You have already reviewed this course.")

    review = Review(
        id=f"review-{_millis()}",
        student_id=user.id,
        student_name=user.name,
        rating=form.rating,
        comment=form.comment.strip(),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    updated = course.model_copy(update={"reviews": [*course.reviews, review]})
    _save_courses(store, org, [updated if c.id == course_id else c for c in org.courses])
    return review
