import pytest

from skillspot.core.exceptions import AuthenticationError, ConfigurationError, ConflictError, ValidationError
from skillspot.services import auth_provider
from skillspot.services.auth_provider import LocalAuthProvider


@pytest.fixture
def local_auth(store, monkeypatch):
    monkeypatch.setattr(auth_provider, "BCRYPT_ROUNDS", 4)
    return LocalAuthProvider(store, "test-secret", expire_minutes=5)


def test_sign_up_and_sign_in(local_auth):
    session = local_auth.sign_up(" Ada@Example.org ", "pw-123", {"full_name": "Ada"})

    again = local_auth.sign_in("ada@example.org", "pw-123")

    assert session.identity.email == "ada@example.org"
    assert again.identity.id == session.identity.id
    assert local_auth.get_identity(again.access_token).metadata == {"full_name": "Ada"}


def test_password_is_not_stored_in_clear(local_auth, store):
    local_auth.sign_up("ada@example.org", "pw-123")

    [row] = store.select(auth_provider.IDENTITIES)
    assert "pw-123" not in str(row)
    assert auth_provider.verify_password("pw-123", row["passwordHash"])


def test_bad_credentials(local_auth):
    local_auth.sign_up("ada@example.org", "pw-123")

    with pytest.raises(AuthenticationError):
        local_auth.sign_in("ada@example.org", "wrong")
    with pytest.raises(AuthenticationError):
        local_auth.sign_in("nobody@example.org", "pw-123")


def test_sign_up_validation(local_auth):
    local_auth.sign_up("ada@example.org", "pw-123")

    with pytest.raises(ConflictError):
        local_auth.sign_up("ADA@example.org", "other")
    with pytest.raises(ValidationError):
        local_auth.sign_up("not-an-email", "pw")
    with pytest.raises(ValidationError):
        local_auth.sign_up("bo@example.org", "")


def test_sign_out_invalidates_earlier_tokens(local_auth):
    session = local_auth.sign_up("ada@example.org", "pw-123")

    local_auth.sign_out(session.access_token)

    with pytest.raises(AuthenticationError):
        local_auth.get_identity(session.access_token)
    fresh = local_auth.sign_in("ada@example.org", "pw-123")
    assert local_auth.get_identity(fresh.access_token).email == "ada@example.org"


def test_tampered_token(local_auth):
    session = local_auth.sign_up("ada@example.org", "pw-123")
    other = LocalAuthProvider(local_auth.store, "another-secret")

    with pytest.raises(AuthenticationError):
        other.get_identity(session.access_token)
    with pytest.raises(AuthenticationError):
        local_auth.get_identity("garbage")


def test_external_providers_are_unavailable_locally(local_auth):
    with pytest.raises(ConfigurationError):
        local_auth.oauth_url("google")


def test_deleted_identity_frees_the_email(local_auth):
    session = local_auth.sign_up("ada@example.org", "pw-123")

    local_auth.delete_identity(session.identity.id)

    with pytest.raises(AuthenticationError):
        local_auth.get_identity(session.access_token)
    assert local_auth.sign_up("ada@example.org", "pw-456").identity.id != session.identity.id
