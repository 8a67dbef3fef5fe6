import pytest
from datetime import timedelta

from socialdata.exceptions import ProviderAuthError

@pytest.mark.asyncio
async def test_password_hashing(identity_provider):
    """Test password hashing and verification"""
    password = "TestPassword123!"
    hashed = identity_provider.get_password_hash(password)

    assert hashed != password
    assert identity_provider.verify_password(password, hashed)
    assert not identity_provider.verify_password("WrongPassword", hashed)

@pytest.mark.asyncio
async def test_id_token_round_trip(identity_provider):
    """Test ID token creation and verification"""
    token = identity_provider.create_id_token("uid-1", "ada@example.com")

    assert identity_provider.verify_id_token(token) == "uid-1"
    assert identity_provider.verify_id_token("invalid.token.here") is None

@pytest.mark.asyncio
async def test_expired_id_token(identity_provider):
    token = identity_provider.create_id_token("uid-1", "ada@example.com", expires_delta=timedelta(minutes=-1))

    assert identity_provider.verify_id_token(token) is None

@pytest.mark.asyncio
async def test_signup_sets_user_and_display_name(auth_session):
    await auth_session.signup("ada@example.com", "secret123", "Ada")

    assert auth_session.user is not None
    assert auth_session.user.email == "ada@example.com"
    assert auth_session.display_name == "Ada"
    assert auth_session.user_id == auth_session.user.uid
    assert auth_session.loading is False
    assert auth_session.error is None

@pytest.mark.asyncio
async def test_logout_then_login(auth_session):
    await auth_session.signup("ada@example.com", "secret123", "Ada")
    uid = auth_session.user_id

    await auth_session.logout()
    assert auth_session.user is None
    assert auth_session.display_name == "Anonymous"

    await auth_session.login("Ada@Example.com", "secret123")
    assert auth_session.user_id == uid
    assert auth_session.user.display_name == "Ada"
    assert auth_session.user.id_token

@pytest.mark.asyncio
async def test_login_with_wrong_password(auth_session):
    await auth_session.signup("ada@example.com", "secret123", "Ada")
    await auth_session.logout()

    with pytest.raises(ProviderAuthError) as exc_info:
        await auth_session.login("ada@example.com", "wrong-password")

    assert exc_info.value.code == "auth/invalid-credential"
    assert auth_session.error == "Invalid email or password."
    assert auth_session.user is None
    assert auth_session.loading is False

@pytest.mark.asyncio
async def test_duplicate_email_rejected(auth_session):
    await auth_session.signup("ada@example.com", "secret123", "Ada")

    with pytest.raises(ProviderAuthError):
        await auth_session.signup("ada@example.com", "another123", "Imposter")

    assert auth_session.error == "The email address is already in use by another account."

@pytest.mark.asyncio
async def test_weak_password_and_bad_email(auth_session):
    with pytest.raises(ProviderAuthError):
        await auth_session.signup("ada@example.com", "123", "Ada")
    assert auth_session.error == "Password should be at least 6 characters"

    with pytest.raises(ProviderAuthError):
        await auth_session.signup("not-an-email", "secret123", "Ada")
    assert auth_session.error == "The email address is badly formatted."

@pytest.mark.asyncio
async def test_error_cleared_on_next_success(auth_session):
    with pytest.raises(ProviderAuthError):
        await auth_session.login("nobody@example.com", "secret123")

    await auth_session.signup("nobody@example.com", "secret123", "Nobody")

    assert auth_session.error is None

@pytest.mark.asyncio
async def test_update_user_name(auth_session):
    await auth_session.signup("ada@example.com", "secret123", "Ada")

    await auth_session.update_user_name("Countess")

    assert auth_session.display_name == "Countess"

@pytest.mark.asyncio
async def test_provider_rename_without_user(identity_provider):
    with pytest.raises(ProviderAuthError, match="No user is currently signed in."):
        await identity_provider.update_display_name("Ghost")

@pytest.mark.asyncio
async def test_closed_session_stops_tracking(identity_provider, auth_session):
    await auth_session.close()

    await identity_provider.create_account("ada@example.com", "secret123")

    assert auth_session.user is None
    assert identity_provider.current_user is not None
