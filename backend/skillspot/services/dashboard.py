from __future__ import annotations

from typing import Dict

from ..core.store import DataStore
from ..models.enrollment import EnrollmentStatus
from ..models.user import Role
from .data_loader import load_all


async def admin_stats(store: DataStore) -> Dict[str, int]:
    """Headline numbers for the admin dashboard, from one bulk load."""
    snap = await load_all(store)
    return {
        "totalUsers": sum(1 for u in snap.users if u.get("role") == Role.STUDENT.value),
        "totalNgos": len(snap.ngos),
        "totalCourses": sum(len(n.get("courses") or []) for n in snap.ngos),
        "pendingEnrollments": sum(
            1 for e in snap.enrollments if e.get("status") == EnrollmentStatus.PENDING.value
        ),
    }
