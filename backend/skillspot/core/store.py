"""Table-like access to the four SkillSpot collections.

Services only ever need select-all, filter-by-equality, insert, update and
delete, so that is the whole surface. ``SupabaseStore`` talks to the hosted
project; ``LocalStore`` keeps the same rows in a JSON file for local runs
and demos without a Supabase project.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import httpx
from supabase import Client, create_client

from .config import Settings
from .exceptions import ConfigurationError, DataServiceError, translate_backend_error

logger = logging.getLogger(__name__)

NGOS = "ngos"
USERS = "users"
ENROLLMENTS = "enrollments"
NOTIFICATIONS = "notifications"

TABLES = (NGOS, USERS, ENROLLMENTS, NOTIFICATIONS)

# Auth identities for local mode; Supabase keeps these in its auth schema
IDENTITIES = "identities"
LOCAL_TABLES = TABLES + (IDENTITIES,)

# Primary key column per table; everything else keys on "id"
PRIMARY_KEYS: Dict[str, str] = {ENROLLMENTS: "enrollmentId"}

Row = Dict[str, Any]


def primary_key(table: str) -> str:
    return PRIMARY_KEYS.get(table, "id")


class DataStore:
    """Interface shared by the Supabase and local backends."""

    name = "abstract"

    def select(self, table: str, **eq: Any) -> List[Row]:
        raise NotImplementedError

    def insert(self, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        raise NotImplementedError

    def update(self, table: str, values: Row, **eq: Any) -> List[Row]:
        raise NotImplementedError

    def delete(self, table: str, **eq: Any) -> List[Row]:
        raise NotImplementedError

    def select_one(self, table: str, **eq: Any) -> Row | None:
        rows = self.select(table, **eq)
        return rows[0] if rows else None


class SupabaseStore(DataStore):
    name = "supabase"

    def __init__(self, client: Client):
        self.client = client

    def _run(self, table: str, op: str, build, reading: bool) -> List[Row]:
        try:
            resp = build().execute()
        except httpx.HTTPError as e:
            # transport failure, no response from the service
            logger.error("[supabase] %s on '%s' could not reach the service: %r", op, table, e)
            raise DataServiceError(f"Could not reach Supabase: {e}") from e
        except Exception as e:
            logger.error("[supabase] %s on '%s' failed: %r", op, table, e)
            raise DataServiceError(translate_backend_error(e, reading=reading)) from e
        return list(getattr(resp, "data", None) or [])

    @staticmethod
    def _filtered(query, eq: Dict[str, Any]):
        for col, value in eq.items():
            query = query.eq(col, value)
        return query

    def select(self, table: str, **eq: Any) -> List[Row]:
        return self._run(
            table, "select",
            lambda: self._filtered(self.client.table(table).select("*"), eq),
            reading=True,
        )

    def insert(self, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        return self._run(table, "insert", lambda: self.client.table(table).insert(rows), reading=False)

    def update(self, table: str, values: Row, **eq: Any) -> List[Row]:
        return self._run(
            table, "update",
            lambda: self._filtered(self.client.table(table).update(values), eq),
            reading=False,
        )

    def delete(self, table: str, **eq: Any) -> List[Row]:
        return self._run(
            table, "delete",
            lambda: self._filtered(self.client.table(table).delete(), eq),
            reading=False,
        )

    def probe(self) -> int:
        """Tiny exact count to confirm keys and read policies are in place."""
        resp = self.client.table(NGOS).select("id", count="exact").range(0, 0).execute()
        return int(getattr(resp, "count", 0) or 0)


class LocalStore(DataStore):
    """JSON-file backend; one document holding every collection."""

    name = "local"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write({t: [] for t in LOCAL_TABLES})

    def _read(self) -> Dict[str, List[Row]]:
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        for t in LOCAL_TABLES:
            data.setdefault(t, [])
        return data

    def _write(self, data: Dict[str, List[Row]]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    @staticmethod
    def _matches(row: Row, eq: Dict[str, Any]) -> bool:
        return all(row.get(col) == value for col, value in eq.items())

    def _table(self, data: Dict[str, List[Row]], table: str) -> List[Row]:
        if table not in data:
            raise DataServiceError(f"relation \"public.{table}\" does not exist")
        return data[table]

    def select(self, table: str, **eq: Any) -> List[Row]:
        with self._lock:
            rows = self._table(self._read(), table)
            return [dict(r) for r in rows if self._matches(r, eq)]

    def insert(self, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        batch: Iterable[Row] = [rows] if isinstance(rows, dict) else rows
        key = primary_key(table)
        with self._lock:
            data = self._read()
            existing = self._table(data, table)
            taken = {r.get(key) for r in existing}
            inserted: List[Row] = []
            for row in batch:
                row = dict(row)
                if not row.get(key):
                    row[key] = str(uuid.uuid4())
                if row[key] in taken:
                    raise DataServiceError(
                        f'duplicate key value violates unique constraint "{table}_pkey"'
                    )
                taken.add(row[key])
                existing.append(row)
                inserted.append(dict(row))
            self._write(data)
        return inserted

    def update(self, table: str, values: Row, **eq: Any) -> List[Row]:
        with self._lock:
            data = self._read()
            updated: List[Row] = []
            for row in self._table(data, table):
                if self._matches(row, eq):
                    row.update(values)
                    updated.append(dict(row))
            if updated:
                self._write(data)
        return updated

    def delete(self, table: str, **eq: Any) -> List[Row]:
        with self._lock:
            data = self._read()
            rows = self._table(data, table)
            kept = [r for r in rows if not self._matches(r, eq)]
            deleted = [r for r in rows if self._matches(r, eq)]
            if deleted:
                data[table] = kept
                self._write(data)
        return deleted


def create_supabase_client(settings: Settings) -> Client:
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ConfigurationError(
            "Missing Supabase credentials. Ensure SUPABASE_URL and a key "
            "(e.g., SUPABASE_SERVICE_ROLE_KEY) are set in the environment, "
            "or run with DATA_BACKEND=local."
        )
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def build_store(settings: Settings, client: Client | None = None) -> DataStore:
    if settings.DATA_BACKEND == "local":
        logger.info("[store] using local JSON store at %s", settings.LOCAL_STORE_PATH)
        return LocalStore(settings.LOCAL_STORE_PATH)
    if settings.DATA_BACKEND != "supabase":
        raise ConfigurationError(f"Unknown DATA_BACKEND '{settings.DATA_BACKEND}' (expected 'supabase' or 'local')")
    return SupabaseStore(client or create_supabase_client(settings))
