from skillspot.core.exceptions import DataServiceError
from skillspot.core.store import USERS
from skillspot.services.auth_provider import Identity


def _register(client, email="maya@example.org", password="s3cret!", name="Maya Lin"):
    return client.post("/api/auth/register", json={"name": name, "email": email, "password": password})


def test_register_creates_student_profile(client, store):
    resp = _register(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["accessToken"]
    assert body["user"]["role"] == "student"
    assert store.select_one(USERS, email="maya@example.org")["name"] == "Maya Lin"


def test_register_requires_every_field(client):
    resp = client.post("/api/auth/register", json={"name": "", "email": "x@example.org", "password": "pw"})
    assert resp.status_code == 422


def test_duplicate_registration_conflicts(client):
    _register(client)
    assert _register(client).status_code == 409


def test_login_then_me_then_logout(client, auth):
    _register(client)

    login = client.post("/api/auth/login", json={"email": "Maya@Example.org", "password": "s3cret!"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['accessToken']}"}

    me = client.get("/api/auth/me", headers=headers)
    assert me.json()["name"] == "Maya Lin"

    assert client.post("/api/auth/logout", headers=headers).status_code == 204
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_wrong_password(client):
    _register(client)
    resp = client.post("/api/auth/login", json={"email": "maya@example.org", "password": "nope"})
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_email_identity_without_profile_is_rejected_and_signed_out(client, auth):
    token = auth.issue(Identity(id="orphan", email="orphan@example.org"))

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert token in auth.signed_out


def test_first_google_sign_in_provisions_student(client, auth, store):
    identity = Identity(id="g-77", email="lee@gmail.com", provider="google", metadata={"name": "Lee"})
    token = auth.issue(identity)

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert resp.json() == {"id": "g-77", "name": "Lee", "email": "lee@gmail.com", "role": "student",
                           "phone": None, "ngoId": None}
    assert store.select_one(USERS, id="g-77") is not None


def test_oauth_url(client):
    resp = client.get("/api/auth/oauth/google", params={"redirect_to": "http://localhost:5173"})
    assert resp.json()["url"].startswith("https://auth.example.test/google")


def test_me_requires_a_token(client):
    assert client.get("/api/auth/me").status_code == 401


def _fail_first_insert(monkeypatch, store, table):
    real_insert = store.insert
    failed = []

    def insert(name, rows):
        if name == table and not failed:
            failed.append(name)
            raise DataServiceError("Could not reach Supabase: connection reset")
        return real_insert(name, rows)

    monkeypatch.setattr(store, "insert", insert)


def test_failed_profile_write_does_not_strand_the_account(client, store, monkeypatch):
    _fail_first_insert(monkeypatch, store, USERS)

    assert _register(client).status_code == 502
    assert store.select(USERS) == []

    retry = _register(client)
    assert retry.status_code == 201
    login = client.post("/api/auth/login", json={"email": "maya@example.org", "password": "s3cret!"})
    assert login.status_code == 200
    assert login.json()["user"]["name"] == "Maya Lin"
