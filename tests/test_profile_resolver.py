import threading

import pytest

from skillspot.core.exceptions import (
    RLS_USER_INSERT_MESSAGE,
    AuthenticationError,
    ConfigurationError,
    DataServiceError,
)
from skillspot.core.store import USERS
from skillspot.models.user import Role
from skillspot.services.auth_provider import Identity
from skillspot.services.profile_resolver import default_display_name, resolve_profile


class RejectingInsertStore:
    def __init__(self, inner):
        self.inner = inner

    def select_one(self, table, **eq):
        return self.inner.select_one(table, **eq)

    def insert(self, table, rows):
        raise DataServiceError('new row violates row-level security policy for table "users"')


class LockstepStore:
    """Holds each thread's first profile lookup until every thread has made one."""

    def __init__(self, inner, parties):
        self.inner = inner
        self.barrier = threading.Barrier(parties)
        self.waited = set()

    def select_one(self, table, **eq):
        row = self.inner.select_one(table, **eq)
        me = threading.get_ident()
        if me not in self.waited:
            self.waited.add(me)
            self.barrier.wait(timeout=5)
        return row

    def insert(self, table, rows):
        return self.inner.insert(table, rows)


def test_existing_profile_is_returned(store, auth):
    store.insert(USERS, {"id": "u1", "name": "Ada", "email": "ada@example.org", "role": "admin", "ngoId": "ngo-1"})

    user = resolve_profile(store, auth, Identity(id="u1", email="ada@example.org"), "tok")

    assert user.name == "Ada"
    assert user.role == Role.ADMIN
    assert user.ngo_id == "ngo-1"
    assert auth.signed_out == []


def test_first_external_sign_in_creates_student_profile(store, auth):
    identity = Identity(id="g1", email="lee@gmail.com", provider="google", metadata={"full_name": "Lee Park"})

    user = resolve_profile(store, auth, identity, "tok")

    assert user.role == Role.STUDENT
    assert user.name == "Lee Park"
    assert store.select_one(USERS, id="g1")["email"] == "lee@gmail.com"


def test_external_name_falls_back_to_email_local_part():
    assert default_display_name(Identity(id="x", email="kim.j@mail.com", provider="google")) == "kim.j"
    assert default_display_name(Identity(id="x", email=None, provider="google")) == "New User"


def test_external_sign_in_without_email_is_signed_out(store, auth):
    identity = Identity(id="g2", email=None, provider="github")

    with pytest.raises(AuthenticationError):
        resolve_profile(store, auth, identity, "tok-g2")

    assert auth.signed_out == ["tok-g2"]
    assert store.select(USERS) == []


def test_rejected_profile_insert_signs_out_with_configuration_error(store, auth):
    identity = Identity(id="g3", email="x@gmail.com", provider="google")

    with pytest.raises(ConfigurationError) as info:
        resolve_profile(RejectingInsertStore(store), auth, identity, "tok-g3")

    assert info.value.message == RLS_USER_INSERT_MESSAGE
    assert auth.signed_out == ["tok-g3"]


def test_email_identity_without_profile_is_signed_out(store, auth):
    with pytest.raises(AuthenticationError):
        resolve_profile(store, auth, Identity(id="e1", email="e@example.org"), "tok-e1")

    assert auth.signed_out == ["tok-e1"]
    assert store.select(USERS) == []


def test_concurrent_first_sign_ins_share_one_profile(store, auth):
    identity = Identity(id="g-1", email="lee@gmail.com", provider="google")
    racing = LockstepStore(store, parties=2)
    results = []

    def resolve(token):
        try:
            results.append(resolve_profile(racing, auth, identity, token).id)
        except Exception as e:
            results.append(type(e).__name__)

    threads = [threading.Thread(target=resolve, args=(f"tok-{i}",)) for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert results == ["g-1", "g-1"]
    assert auth.signed_out == []
    assert len(store.select(USERS, id="g-1")) == 1
