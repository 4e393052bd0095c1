from enum import Enum
from typing import Optional

from .base import CamelModel


class Role(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"


class User(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: Role = Role.STUDENT
    ngo_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class RegisterRequest(CamelModel):
    name: str = ""
    email: str = ""
    password: str = ""
    phone: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class SessionResponse(CamelModel):
    access_token: Optional[str] = None
    token_type: str = "bearer"
    user: User
