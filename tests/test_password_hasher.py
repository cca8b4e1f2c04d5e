from __future__ import annotations

from datetime import datetime, timezone

import pytest
from passlib.exc import MissingBackendError

from authcore.application.services.credential_verifier import CredentialVerifier
from authcore.domain.exceptions import InvalidCredentialsError
from authcore.infrastructure.security.password_hasher import PasswordHasher

from fakes import FakeAuthPort


def test_hash_and_verify_with_argon2():
    hasher = PasswordHasher()

    password_hash = hasher.hash("longenough1")

    assert password_hash.startswith("$argon2")
    assert password_hash != "longenough1"
    assert hasher.verify("longenough1", password_hash) is True
    assert hasher.verify("wrong-password", password_hash) is False


def test_hashes_are_salted():
    hasher = PasswordHasher()

    assert hasher.hash("longenough1") != hasher.hash("longenough1")


def test_verify_with_empty_hash_raises():
    with pytest.raises(ValueError):
        PasswordHasher().verify("longenough1", "")


def test_verify_with_malformed_hash_raises():
    with pytest.raises(ValueError):
        PasswordHasher().verify("longenough1", "not-a-hash")


def test_credential_verifier_verify_password_rejects_empty_hash():
    verifier = CredentialVerifier(auth_port=FakeAuthPort(), password_hasher=PasswordHasher())

    with pytest.raises(ValueError):
        verifier.verify_password("", "longenough1")


def test_legacy_scheme_needs_rehash():
    legacy_hash = PasswordHasher(schemes=("pbkdf2_sha256",)).hash("longenough1")
    hasher = PasswordHasher(schemes=("argon2", "pbkdf2_sha256"))

    assert hasher.verify("longenough1", legacy_hash) is True
    assert hasher.needs_rehash(legacy_hash) is True
    assert hasher.needs_rehash(hasher.hash("longenough1")) is False


def test_authenticate_upgrades_legacy_hash():
    auth_port = FakeAuthPort()
    now = datetime.now(timezone.utc)
    auth_port.create_user(
        user_id="user-1",
        email="u@test.io",
        password_hash=PasswordHasher(schemes=("pbkdf2_sha256",)).hash("longenough1"),
        first_name="",
        last_name="",
        profile_picture=None,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    verifier = CredentialVerifier(
        auth_port=auth_port,
        password_hasher=PasswordHasher(schemes=("argon2", "pbkdf2_sha256")),
    )

    verifier.authenticate(email="u@test.io", password="longenough1")

    assert auth_port.users["user-1"].password_hash.startswith("$argon2")
    verifier.authenticate(email="u@test.io", password="longenough1")


def _user_with_hash(auth_port: FakeAuthPort, password_hash: str) -> None:
    now = datetime.now(timezone.utc)
    auth_port.create_user(
        user_id="user-1",
        email="u@test.io",
        password_hash=password_hash,
        first_name="",
        last_name="",
        profile_picture=None,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def test_authenticate_with_unrecognized_hash_is_invalid_credentials():
    auth_port = FakeAuthPort()
    _user_with_hash(auth_port, "not-a-hash")
    verifier = CredentialVerifier(auth_port=auth_port, password_hasher=PasswordHasher())

    with pytest.raises(InvalidCredentialsError) as exc_info:
        verifier.authenticate(email="u@test.io", password="longenough1")

    assert str(exc_info.value) == "Invalid credentials."


class BackendlessContext:
    def verify(self, secret, hash):
        raise MissingBackendError("bcrypt: no backends available")


def test_missing_backend_is_reported_as_value_error():
    hasher = PasswordHasher()
    hasher._ctx = BackendlessContext()

    with pytest.raises(ValueError):
        hasher.verify("longenough1", "$2b$12$abcdefghijklmnopqrstuu5Nw1H8l0SK5sVx1zJ0rj8pG2b1aQmW")


def test_authenticate_with_missing_backend_is_invalid_credentials():
    auth_port = FakeAuthPort()
    _user_with_hash(auth_port, "$2b$12$abcdefghijklmnopqrstuu5Nw1H8l0SK5sVx1zJ0rj8pG2b1aQmW")
    hasher = PasswordHasher()
    hasher._ctx = BackendlessContext()
    verifier = CredentialVerifier(auth_port=auth_port, password_hasher=hasher)

    with pytest.raises(InvalidCredentialsError):
        verifier.authenticate(email="u@test.io", password="longenough1")


def test_legacy_bcrypt_hash_verifies_and_is_upgraded():
    legacy_hash = PasswordHasher(schemes=("bcrypt",)).hash("longenough1")
    auth_port = FakeAuthPort()
    _user_with_hash(auth_port, legacy_hash)
    verifier = CredentialVerifier(auth_port=auth_port, password_hasher=PasswordHasher())

    user = verifier.authenticate(email="u@test.io", password="longenough1")

    assert user.id == "user-1"
    assert legacy_hash.startswith("$2")
    assert auth_port.users["user-1"].password_hash.startswith("$argon2")
