from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from authcore.domain.exceptions import (
    AlreadyLinkedToOtherAccountError,
    EmailAlreadyExistsError,
    ProviderAlreadyLinkedError,
)
from authcore.infrastructure.db.engine import init_schema
from authcore.infrastructure.db.mappers.accounts_mapper import map_row_to_refresh_token, map_row_to_user
from authcore.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository


NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def repository():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_schema(engine)
    yield SqlAccountsRepository(engine)
    engine.dispose()


def _create_user(repository, *, user_id: str = "user-1", email: str = "u@test.io", password_hash="hash"):
    return repository.create_user(
        user_id=user_id,
        email=email,
        password_hash=password_hash,
        first_name="Ada",
        last_name="Lovelace",
        profile_picture=None,
        is_active=True,
        created_at=NOW,
        updated_at=NOW,
    )


def _link(repository, *, identity_id: str, user_id: str, provider: str = "google", provider_id: str = "g-123"):
    return repository.create_linked_identity(
        identity_id=identity_id,
        user_id=user_id,
        provider=provider,
        provider_id=provider_id,
        provider_access_token="",
        provider_refresh_token=None,
        provider_token_expiry=None,
        created_at=NOW,
    )


def test_create_and_read_user(repository):
    created = _create_user(repository)

    by_id = repository.get_user_by_id(user_id="user-1")
    by_email = repository.get_user_by_email(email="U@TEST.io")

    assert created.id == by_id.id == by_email.id == "user-1"
    assert by_id.password_hash == "hash"
    assert by_id.is_active is True
    assert by_id.created_at == NOW
    assert repository.get_user_by_email(email="other@test.io") is None
    assert repository.get_user_by_email(email="") is None


def test_duplicate_email_raises_email_already_exists(repository):
    _create_user(repository)

    with pytest.raises(EmailAlreadyExistsError):
        _create_user(repository, user_id="user-2")


def test_users_without_email_can_coexist(repository):
    first = _create_user(repository, user_id="user-1", email="", password_hash=None)
    second = _create_user(repository, user_id="user-2", email="", password_hash=None)

    assert first.email == second.email == ""
    assert first.password_hash is None


def test_update_user_profile(repository):
    _create_user(repository)

    updated = repository.update_user_profile(
        user_id="user-1",
        first_name="Grace",
        last_name="Hopper",
        profile_picture="https://p/g.png",
        updated_at=NOW + timedelta(minutes=1),
    )

    assert updated.first_name == "Grace"
    assert updated.profile_picture == "https://p/g.png"
    assert updated.updated_at == NOW + timedelta(minutes=1)
    assert repository.update_user_profile(
        user_id="ghost",
        first_name="",
        last_name="",
        profile_picture=None,
        updated_at=NOW,
    ) is None


def test_linked_identity_lookups(repository):
    _create_user(repository)
    _link(repository, identity_id="sa-1", user_id="user-1")

    assert repository.get_user_by_linked_identity(provider="google", provider_id="g-123").id == "user-1"
    assert repository.get_linked_identity(provider="google", provider_id="g-123").user_id == "user-1"
    assert repository.get_linked_identity_for_user_provider(user_id="user-1", provider="google").id == "sa-1"
    assert [i.provider for i in repository.list_linked_identities(user_id="user-1")] == ["google"]
    assert repository.get_user_by_linked_identity(provider="facebook", provider_id="g-123") is None


def test_identity_owned_by_other_user_is_rejected(repository):
    _create_user(repository, user_id="user-1", email="a@test.io")
    _create_user(repository, user_id="user-2", email="b@test.io")
    _link(repository, identity_id="sa-1", user_id="user-1")

    with pytest.raises(AlreadyLinkedToOtherAccountError):
        _link(repository, identity_id="sa-2", user_id="user-2")


def test_second_identity_for_same_provider_is_rejected(repository):
    _create_user(repository)
    _link(repository, identity_id="sa-1", user_id="user-1")

    with pytest.raises(ProviderAlreadyLinkedError):
        _link(repository, identity_id="sa-2", user_id="user-1", provider_id="g-456")


def test_revoke_refresh_token_succeeds_once(repository):
    _create_user(repository)
    repository.create_refresh_token(
        token_id="rt-1",
        user_id="user-1",
        token="token-value",
        expires_at=NOW + timedelta(days=7),
        created_at=NOW,
    )

    assert repository.revoke_refresh_token(token_id="rt-1") is True
    assert repository.revoke_refresh_token(token_id="rt-1") is False
    assert repository.revoke_refresh_token(token_id="missing") is False

    record = repository.get_refresh_token(token="token-value")
    assert record.revoked is True
    assert record.expires_at == NOW + timedelta(days=7)
    assert repository.get_refresh_token(token="other") is None


def test_execute_in_transaction_rolls_back_on_error(repository):
    def _tx(tx_repository):
        _create_user(tx_repository)
        _link(tx_repository, identity_id="sa-1", user_id="user-1")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        repository.execute_in_transaction(_tx)

    assert repository.get_user_by_id(user_id="user-1") is None
    assert repository.get_linked_identity(provider="google", provider_id="g-123") is None


def test_execute_in_transaction_commits_on_success(repository):
    def _tx(tx_repository):
        user = _create_user(tx_repository)
        _link(tx_repository, identity_id="sa-1", user_id=user.id)
        return user

    user = repository.execute_in_transaction(_tx)

    assert repository.get_user_by_linked_identity(provider="google", provider_id="g-123").id == user.id


def test_map_row_to_user_accepts_iso_strings_and_null_email():
    user = map_row_to_user(
        {
            "id": "user-1",
            "email": None,
            "password": None,
            "first_name": None,
            "last_name": "L",
            "profile_picture": "",
            "is_active": 1,
            "created_at": "2026-03-01 09:30:00.000000",
            "updated_at": "2026-03-01T09:30:00+00:00",
        }
    )

    assert user.email == ""
    assert user.password_hash is None
    assert user.first_name == ""
    assert user.profile_picture is None
    assert user.is_active is True
    assert user.created_at == NOW
    assert user.updated_at == NOW


def test_map_row_to_refresh_token_normalizes_naive_datetimes():
    record = map_row_to_refresh_token(
        {
            "id": "rt-1",
            "user_id": "user-1",
            "token": "t",
            "expires_at": datetime(2026, 3, 8, 9, 30),
            "revoked": 0,
            "created_at": NOW,
        }
    )

    assert record.expires_at.tzinfo is not None
    assert record.revoked is False
    assert record.is_redeemable(now=NOW) is True


def test_update_user_password(repository):
    _create_user(repository)

    repository.update_user_password(user_id="user-1", password_hash="new-hash", updated_at=NOW + timedelta(hours=1))

    user = repository.get_user_by_id(user_id="user-1")
    assert user.password_hash == "new-hash"
    assert user.updated_at == NOW + timedelta(hours=1)
