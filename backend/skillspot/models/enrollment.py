from enum import Enum
from typing import Optional

from .base import CamelModel


class EnrollmentStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Enrollment(CamelModel):
    enrollment_id: Optional[str] = None
    student_id: str
    student_name: str = ""
    course_id: str
    course_name: str = ""
    ngo_id: str
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    request_date: str
    previous_experience: Optional[str] = None
    reason_for_joining: Optional[str] = None


class EnrollmentRequest(CamelModel):
    ngo_id: str
    course_id: str
    previous_experience: str = ""
    reason_for_joining: str = ""


class StatusUpdate(CamelModel):
    status: EnrollmentStatus


class StudentEnrollmentRow(CamelModel):
    enrollment_id: str
    course_id: str
    course_name: str
    ngo_id: str
    ngo_name: str
    status: EnrollmentStatus
    request_date: str
