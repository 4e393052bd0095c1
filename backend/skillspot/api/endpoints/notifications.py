from typing import List

from fastapi import APIRouter

from ...models.notification import Notification
from ...services import notifications as notification_service
from ..deps import CurrentUser, StoreDep

router = APIRouter()


@router.get("", response_model=List[Notification])
def my_notifications(store: StoreDep, user: CurrentUser):
    return notification_service.list_notifications(store, user)


@router.get("/unread-count")
def unread(store: StoreDep, user: CurrentUser):
    return {"unread": notification_service.unread_count(store, user)}


@router.post("/{notification_id}/read", response_model=Notification)
def read_one(notification_id: str, store: StoreDep, user: CurrentUser):
    return notification_service.mark_read(store, user, notification_id)


@router.post("/read-all")
def read_all(store: StoreDep, user: CurrentUser):
    return {"updated": notification_service.mark_all_read(store, user)}
