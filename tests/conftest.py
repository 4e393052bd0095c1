import uuid
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from skillspot.core.config import Settings
from skillspot.core.exceptions import AuthenticationError, ConflictError
from skillspot.core.store import USERS, LocalStore
from skillspot.main import create_app
from skillspot.services.auth_provider import AuthProvider, AuthSession, Identity


class FakeAuth(AuthProvider):
    """In-memory identity provider; tokens are opaque strings."""

    def __init__(self):
        self.by_token = {}
        self.passwords = {}
        self.signed_out = []

    def issue(self, identity: Identity) -> str:
        token = f"tok-{uuid.uuid4().hex}"
        self.by_token[token] = identity
        return token

    def sign_up(self, email, password, metadata=None):
        email = email.strip().lower()
        if email in self.passwords:
            raise ConflictError("A user with this email already exists.")
        identity = Identity(id=str(uuid.uuid4()), email=email, metadata=metadata or {})
        self.passwords[email] = (password, identity)
        return AuthSession(access_token=self.issue(identity), identity=identity)

    def sign_in(self, email, password):
        stored = self.passwords.get(email.strip().lower())
        if not stored or stored[0] != password:
            raise AuthenticationError("Invalid email or password.")
        return AuthSession(access_token=self.issue(stored[1]), identity=stored[1])

    def oauth_url(self, provider, redirect_to=None):
        return f"https://auth.example.test/{provider}?redirect_to={redirect_to or ''}"

    def get_identity(self, token):
        identity = self.by_token.get(token)
        if identity is None:
            raise AuthenticationError("Session is invalid or has expired.")
        return identity

    def sign_out(self, token):
        self.signed_out.append(token)
        self.by_token.pop(token, None)

    def delete_identity(self, identity_id):
        self.passwords = {e: v for e, v in self.passwords.items() if v[1].id != identity_id}
        self.by_token = {t: i for t, i in self.by_token.items() if i.id != identity_id}


class FakeModels:
    def __init__(self, reply="Try Full-Stack Web Development at Innovate For Tomorrow."):
        self.reply = reply
        self.calls = []
        self.error = None

    def generate_content(self, model, contents, **kwargs):
        self.calls.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "skillspot.json")


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def gemini():
    return SimpleNamespace(models=FakeModels())


@pytest.fixture
def settings():
    cfg = Settings()
    cfg.DATA_BACKEND = "local"
    cfg.SEED_ON_STARTUP = True
    cfg.GEMINI_MODEL = "gemini-2.5-flash"
    return cfg


@pytest.fixture
def client(settings, store, auth, gemini):
    app = create_app(settings=settings, store=store, auth=auth, gemini_client=gemini)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(store, auth):
    """Insert a profile row and return (profile_row, bearer headers)."""

    def _make(name="Sam Student", role="student", ngo_id=None, email=None):
        email = email or f"{name.split()[0].lower()}-{uuid.uuid4().hex[:6]}@example.org"
        identity = Identity(id=str(uuid.uuid4()), email=email)
        row = {"id": identity.id, "name": name, "email": email, "role": role}
        if ngo_id:
            row["ngoId"] = ngo_id
        store.insert(USERS, row)
        token = auth.issue(identity)
        return row, {"Authorization": f"Bearer {token}"}

    return _make
