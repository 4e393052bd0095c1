from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core.exceptions import DataServiceError, SkillSpotError, translate_backend_error
from ..core.store import ENROLLMENTS, NGOS, NOTIFICATIONS, USERS, DataStore
from .seed_data import demo_ngos

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass
class Snapshot:
    """Everything the dashboards need, fetched in one go."""

    ngos: List[Row] = field(default_factory=list)
    users: List[Row] = field(default_factory=list)
    enrollments: List[Row] = field(default_factory=list)
    notifications: List[Row] = field(default_factory=list)
    seeded: bool = False


def _fetch_error(err: BaseException) -> DataServiceError:
    detail = err.message if isinstance(err, SkillSpotError) else translate_backend_error(err)
    if detail.startswith("Database Security Error"):
        return DataServiceError(detail)
    return DataServiceError(
        "Error fetching data from Supabase. This is likely due to an issue with your "
        f"database schema or Row Level Security policies.\nDetailed Error:\n{detail}"
    )


def seed_if_empty(store: DataStore, ngos: List[Row]) -> tuple[List[Row], bool]:
    """Write the demo organizations when the collection is empty; returns (ngos, seeded)."""
    if ngos:
        return ngos, False
    logger.info("[loader] No NGOs found, seeding database...")
    try:
        store.insert(NGOS, demo_ngos())
    except Exception as e:
        # another loader may have seeded in the meantime
        try:
            current = store.select(NGOS)
        except Exception as reread:
            logger.warning("[loader] re-read after failed seed also failed: %r", reread)
            current = []
        if current:
            logger.info("[loader] directory was seeded concurrently; skipping")
            return current, False
        logger.error("[loader] seeding failed: %r", e)
        raise _fetch_error(e) from e
    try:
        return store.select(NGOS), True
    except Exception as e:
        logger.error("[loader] re-reading seeded NGOs failed: %r", e)
        raise _fetch_error(e) from e


async def load_all(store: DataStore) -> Snapshot:
    """Fetch the four collections in parallel, seeding organizations once if empty."""
    try:
        ngos, users, enrollments, notifications = await asyncio.gather(
            asyncio.to_thread(store.select, NGOS),
            asyncio.to_thread(store.select, USERS),
            asyncio.to_thread(store.select, ENROLLMENTS),
            asyncio.to_thread(store.select, NOTIFICATIONS),
        )
    except Exception as e:
        logger.error("[loader] fetch failed: %r", e)
        raise _fetch_error(e) from e

    ngos, seeded = await asyncio.to_thread(seed_if_empty, store, ngos or [])
    snapshot = Snapshot(
        ngos=ngos or [],
        users=users or [],
        enrollments=enrollments or [],
        notifications=notifications or [],
        seeded=seeded,
    )
    logger.info(
        "[loader] ngos=%d users=%d enrollments=%d notifications=%d seeded=%s",
        len(snapshot.ngos), len(snapshot.users), len(snapshot.enrollments),
        len(snapshot.notifications), seeded,
    )
    return snapshot
