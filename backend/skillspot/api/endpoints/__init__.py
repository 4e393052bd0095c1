from fastapi import APIRouter

from .auth import router as auth_router
from .chat import router as chat_router
from .dashboard import router as dashboard_router
from .enrollments import router as enrollments_router
from .notifications import router as notifications_router
from .organizations import router as organizations_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Auth"])
router.include_router(organizations_router, prefix="/ngos", tags=["NGOs"])
router.include_router(enrollments_router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
router.include_router(chat_router, prefix="/chat", tags=["Assistant"])
