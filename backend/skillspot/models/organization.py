from datetime import date
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class Review(CamelModel):
    id: str
    student_id: str
    student_name: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    created_at: str


class Course(CamelModel):
    id: str
    name: str
    description: str = ""
    category: str = ""
    duration: str = ""
    trainer: str = ""
    seats_available: int = 0
    start_date: str = ""
    reviews: List[Review] = []


class Contact(CamelModel):
    person: str = ""
    email: str = ""
    phone: Optional[str] = None
    website: str = ""


class Organization(CamelModel):
    id: str
    name: str
    logo_url: str = ""
    banner_url: str = ""
    location: str = ""
    category: str = ""
    type: str = ""
    description: str = ""
    mission_statement: str = ""
    contact: Contact = Contact()
    courses: List[Course] = []


# --- Request bodies ---

class CourseForm(CamelModel):
    """Course editor form; seats arrive as text from the form field."""

    name: str = ""
    description: str = ""
    category: str = ""
    duration: str = ""
    trainer: str = ""
    seats_available: str | int = "10"
    start_date: str = Field(default_factory=lambda: date.today().isoformat())


class ReviewForm(CamelModel):
    rating: int
    comment: str = ""


class NgoRegistration(CamelModel):
    ngo_name: str = ""
    location: str = ""
    website: str = ""
    type: str = ""
    description: str = ""
    mission_statement: str = ""
    contact_email: str = ""
    password: str = ""
    logo_data_url: str = ""


class OrganizationUpdate(CamelModel):
    name: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    mission_statement: Optional[str] = None
    contact: Optional[Contact] = None


# --- Views ---

class CourseView(Course):
    average_rating: Optional[float] = None
    action_label: str = "Register Now"
    seats_label: str = ""
    enrollment_status: Optional[str] = None
    registration_disabled: bool = False


class OrganizationDetail(Organization):
    courses: List[CourseView] = []


class DirectoryFilters(CamelModel):
    types: List[str]
    locations: List[str]
