"""Tests for CredentialResolver."""
import pytest

from src.shared.testing import InMemoryUserRepository
from src.services.competitions.exceptions import MISSING_CREDENTIALS_MESSAGE, CredentialsNotFoundError
from src.services.competitions.services.credentials import SYSTEM_USER_ID, CredentialResolver


ENV = {"KAGGLE_USERNAME": "ops", "KAGGLE_KEY": "ops-key"}


@pytest.fixture
async def users():
    repo = InMemoryUserRepository()
    await repo.save_kaggle_credentials("user-1", "alice", "alice-key")
    return repo


@pytest.mark.asyncio
async def test_environment_wins_over_stored_credentials(users):
    resolver = CredentialResolver(user_repository=users, environ=ENV)

    creds = await resolver.resolve("user-1")

    assert (creds.username, creds.key) == ("ops", "ops-key")


@pytest.mark.asyncio
async def test_partial_environment_is_ignored(users):
    resolver = CredentialResolver(user_repository=users, environ={"KAGGLE_USERNAME": "ops"})

    creds = await resolver.resolve("user-1")

    assert (creds.username, creds.key) == ("alice", "alice-key")


@pytest.mark.asyncio
async def test_unknown_user_has_no_credentials(users):
    resolver = CredentialResolver(user_repository=users, environ={})

    assert await resolver.resolve("someone-else") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", [SYSTEM_USER_ID, "", None])
async def test_system_and_empty_users_skip_the_store(users, user_id):
    await users.save_kaggle_credentials(SYSTEM_USER_ID, "should-not", "be-used")
    resolver = CredentialResolver(user_repository=users, environ={})

    assert await resolver.resolve(user_id) is None


@pytest.mark.asyncio
async def test_resolve_or_raise(users):
    resolver = CredentialResolver(user_repository=users, environ={})

    assert (await resolver.resolve_or_raise("user-1")).username == "alice"
    with pytest.raises(CredentialsNotFoundError) as exc_info:
        await resolver.resolve_or_raise("nobody")

    assert exc_info.value.message == MISSING_CREDENTIALS_MESSAGE
    assert exc_info.value.http_status == 400


def test_key_is_not_in_repr():
    creds = CredentialResolver(environ=ENV).from_environment()

    assert "ops-key" not in repr(creds)
