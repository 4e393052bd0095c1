from __future__ import annotations

from typing import List

from ..core.exceptions import NotFoundError, PermissionDeniedError
from ..core.store import NOTIFICATIONS, DataStore
from ..models.notification import Notification
from ..models.user import User


def list_notifications(store: DataStore, user: User) -> List[Notification]:
    rows = store.select(NOTIFICATIONS, userId=user.id)
    items = [Notification.model_validate(r) for r in rows]
    return sorted(items, key=lambda n: n.created_at, reverse=True)


def unread_count(store: DataStore, user: User) -> int:
    return len(store.select(NOTIFICATIONS, userId=user.id, isRead=False))


def mark_read(store: DataStore, user: User, notification_id: str) -> Notification:
    row = store.select_one(NOTIFICATIONS, id=notification_id)
    if not row:
        raise NotFoundError("Notification", notification_id)
    note = Notification.model_validate(row)
    if note.user_id != user.id:
        raise PermissionDeniedError("This notification belongs to another user.")
    rows = store.update(NOTIFICATIONS, {"isRead": True}, id=notification_id)
    return Notification.model_validate(rows[0]) if rows else note.model_copy(update={"is_read": True})


def mark_all_read(store: DataStore, user: User) -> int:
    return len(store.update(NOTIFICATIONS, {"isRead": True}, userId=user.id, isRead=False))
