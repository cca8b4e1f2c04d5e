from __future__ import annotations

import copy
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from authcore.domain.entities.user import IssuedRefreshToken, LinkedIdentity, User
from authcore.domain.exceptions import (
    AlreadyLinkedToOtherAccountError,
    EmailAlreadyExistsError,
    GoogleTokenValidationError,
    ProviderAlreadyLinkedError,
)


class FakeAuthPort:
    """In-memory store with the same uniqueness rules as the SQL schema.

    ``execute_in_transaction`` snapshots every table and restores it when the
    callback raises.
    """

    def __init__(self):
        self.users: dict[str, User] = {}
        self.identities: dict[str, LinkedIdentity] = {}
        self.refresh_tokens: dict[str, IssuedRefreshToken] = {}
        self.transactions = 0

    def execute_in_transaction(self, fn):
        snapshot = copy.deepcopy((self.users, self.identities, self.refresh_tokens))
        self.transactions += 1
        try:
            return fn(self)
        except Exception:
            self.users, self.identities, self.refresh_tokens = snapshot
            raise

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_user_by_email(self, *, email: str) -> User | None:
        if not email:
            return None
        email_l = email.lower()
        for user in self.users.values():
            if user.email and user.email.lower() == email_l:
                return user
        return None

    def create_user(
        self,
        *,
        user_id: str,
        email: str,
        password_hash: str | None,
        first_name: str,
        last_name: str,
        profile_picture: str | None,
        is_active: bool,
        created_at: datetime,
        updated_at: datetime,
    ) -> User:
        if email and self.get_user_by_email(email=email) is not None:
            raise EmailAlreadyExistsError("Email already in use.")
        user = User(
            id=user_id,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            profile_picture=profile_picture,
            is_active=is_active,
            created_at=created_at,
            updated_at=updated_at,
        )
        self.users[user.id] = user
        return user

    def update_user_profile(
        self,
        *,
        user_id: str,
        first_name: str,
        last_name: str,
        profile_picture: str | None,
        updated_at: datetime,
    ) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = replace(
            user,
            first_name=first_name,
            last_name=last_name,
            profile_picture=profile_picture,
            updated_at=updated_at,
        )
        self.users[user_id] = updated
        return updated

    def update_user_password(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        self.users[user_id] = replace(self.users[user_id], password_hash=password_hash, updated_at=updated_at)

    def deactivate_user(self, user_id: str) -> None:
        self.users[user_id] = replace(self.users[user_id], is_active=False)

    def get_user_by_linked_identity(self, *, provider: str, provider_id: str) -> User | None:
        identity = self.get_linked_identity(provider=provider, provider_id=provider_id)
        if identity is None:
            return None
        return self.users.get(identity.user_id)

    def get_linked_identity(self, *, provider: str, provider_id: str) -> LinkedIdentity | None:
        for identity in self.identities.values():
            if identity.provider == provider and identity.provider_id == provider_id:
                return identity
        return None

    def get_linked_identity_for_user_provider(self, *, user_id: str, provider: str) -> LinkedIdentity | None:
        for identity in self.identities.values():
            if identity.user_id == user_id and identity.provider == provider:
                return identity
        return None

    def list_linked_identities(self, *, user_id: str) -> list[LinkedIdentity]:
        return [identity for identity in self.identities.values() if identity.user_id == user_id]

    def create_linked_identity(
        self,
        *,
        identity_id: str,
        user_id: str,
        provider: str,
        provider_id: str,
        provider_access_token: str,
        provider_refresh_token: str | None,
        provider_token_expiry: datetime | None,
        created_at: datetime,
    ) -> LinkedIdentity:
        if self.get_linked_identity_for_user_provider(user_id=user_id, provider=provider) is not None:
            raise ProviderAlreadyLinkedError("User already has this provider linked.")
        if self.get_linked_identity(provider=provider, provider_id=provider_id) is not None:
            raise AlreadyLinkedToOtherAccountError("This provider account is already linked to another user.")
        identity = LinkedIdentity(
            id=identity_id,
            user_id=user_id,
            provider=provider,
            provider_id=provider_id,
            provider_access_token=provider_access_token,
            provider_refresh_token=provider_refresh_token,
            provider_token_expiry=provider_token_expiry,
            created_at=created_at,
            updated_at=created_at,
        )
        self.identities[identity.id] = identity
        return identity

    def create_refresh_token(
        self,
        *,
        token_id: str,
        user_id: str,
        token: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> IssuedRefreshToken:
        record = IssuedRefreshToken(
            id=token_id,
            user_id=user_id,
            token=token,
            expires_at=expires_at,
            revoked=False,
            created_at=created_at,
        )
        self.refresh_tokens[record.id] = record
        return record

    def get_refresh_token(self, *, token: str) -> IssuedRefreshToken | None:
        for record in self.refresh_tokens.values():
            if record.token == token:
                return record
        return None

    def revoke_refresh_token(self, *, token_id: str) -> bool:
        record = self.refresh_tokens.get(token_id)
        if record is None or record.revoked:
            return False
        self.refresh_tokens[token_id] = replace(record, revoked=True)
        return True


class FakePasswordHasher:
    def hash(self, plain_password: str) -> str:
        return f"hashed::{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        if not password_hash:
            raise ValueError("password hash is empty.")
        return password_hash == f"hashed::{plain_password}"

    def needs_rehash(self, password_hash: str) -> bool:
        return False


class FakeGoogleOauthPort:
    def __init__(self, claims_by_token: dict[str, dict[str, Any]] | None = None):
        self.claims_by_token = claims_by_token or {
            "token-google": {
                "sub": "g-123",
                "email": "a@x.com",
                "given_name": "Ada",
                "family_name": "Lovelace",
                "picture": "https://example.com/a.png",
            }
        }

    def verify_id_token(self, *, id_token: str) -> dict[str, Any]:
        claims = self.claims_by_token.get(id_token)
        if claims is None:
            raise GoogleTokenValidationError("Invalid Google id_token.")
        return dict(claims)


class FakeClock:
    def __init__(self, now: datetime | None = None):
        # Signed expiries are checked against wall-clock time, so start there.
        self.now = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)
