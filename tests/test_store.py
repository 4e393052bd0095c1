import httpx
import pytest

from skillspot.core.exceptions import DataServiceError, RLS_READ_MESSAGE
from skillspot.core.store import ENROLLMENTS, NGOS, NOTIFICATIONS, USERS, LocalStore, SupabaseStore


def test_insert_fills_missing_primary_keys(store):
    [note] = store.insert(NOTIFICATIONS, {"userId": "u1", "message": "hi", "isRead": False})
    [enr] = store.insert(ENROLLMENTS, {"studentId": "u1", "courseId": "c1", "ngoId": "n1"})

    assert note["id"]
    assert enr["enrollmentId"]
    assert "id" not in enr


def test_select_filters_by_equality(store):
    store.insert(USERS, [
        {"id": "a1", "role": "admin", "ngoId": "ngo-1"},
        {"id": "a2", "role": "admin", "ngoId": "ngo-2"},
        {"id": "s1", "role": "student"},
    ])

    assert {r["id"] for r in store.select(USERS)} == {"a1", "a2", "s1"}
    assert [r["id"] for r in store.select(USERS, role="admin", ngoId="ngo-1")] == ["a1"]
    assert store.select_one(USERS, id="missing") is None


def test_update_and_delete_return_affected_rows(store):
    store.insert(NOTIFICATIONS, [
        {"id": "n1", "userId": "u1", "isRead": False},
        {"id": "n2", "userId": "u1", "isRead": False},
        {"id": "n3", "userId": "u2", "isRead": False},
    ])

    updated = store.update(NOTIFICATIONS, {"isRead": True}, userId="u1")
    assert {r["id"] for r in updated} == {"n1", "n2"}
    assert store.select_one(NOTIFICATIONS, id="n3")["isRead"] is False

    deleted = store.delete(NOTIFICATIONS, userId="u1")
    assert len(deleted) == 2
    assert [r["id"] for r in store.select(NOTIFICATIONS)] == ["n3"]


def test_duplicate_primary_key_is_rejected(store):
    store.insert(NGOS, {"id": "ngo-1", "name": "A"})
    with pytest.raises(DataServiceError, match="duplicate key"):
        store.insert(NGOS, {"id": "ngo-1", "name": "B"})


def test_rows_persist_across_instances(tmp_path):
    path = tmp_path / "nested" / "db.json"
    LocalStore(path).insert(NGOS, {"id": "ngo-1", "name": "A"})

    assert LocalStore(path).select(NGOS) == [{"id": "ngo-1", "name": "A"}]


def test_returned_rows_are_copies(store):
    store.insert(NGOS, {"id": "ngo-1", "name": "A"})
    row = store.select_one(NGOS, id="ngo-1")
    row["name"] = "changed"

    assert store.select_one(NGOS, id="ngo-1")["name"] == "A"


class FakeQuery:
    """Mimics the postgrest builder chain; ``execute`` raises or returns ``data``."""

    def __init__(self, outcome, calls):
        self.outcome = outcome
        self.calls = calls

    def __getattr__(self, name):
        def step(*args, **kwargs):
            self.calls.append((name, args))
            return self
        return step

    def execute(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return type("Resp", (), {"data": self.outcome})()


class FakeSupabase:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def table(self, name):
        self.calls.append(("table", (name,)))
        return FakeQuery(self.outcome, self.calls)


def test_supabase_select_applies_equality_filters():
    client = FakeSupabase([{"id": "a1"}])

    rows = SupabaseStore(client).select(USERS, role="admin", ngoId="ngo-1")

    assert rows == [{"id": "a1"}]
    assert ("eq", ("role", "admin")) in client.calls
    assert ("eq", ("ngoId", "ngo-1")) in client.calls


def test_supabase_rls_failures_are_translated():
    client = FakeSupabase(Exception('permission denied: new row violates row-level security policy for table "ngos"'))

    with pytest.raises(DataServiceError) as info:
        SupabaseStore(client).select(NGOS)

    assert info.value.message == RLS_READ_MESSAGE


def test_supabase_transport_failures():
    client = FakeSupabase(httpx.ConnectError("connection refused"))

    with pytest.raises(DataServiceError, match="Could not reach Supabase"):
        SupabaseStore(client).select(NGOS)
