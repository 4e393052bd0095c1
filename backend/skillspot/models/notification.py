from typing import Optional

from .base import CamelModel


class Notification(CamelModel):
    id: Optional[str] = None
    user_id: str
    message: str
    link: str = ""
    is_read: bool = False
    created_at: str
