from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, TypeVar

from authcore.domain.entities.user import IssuedRefreshToken, LinkedIdentity, User


TAuthResult = TypeVar("TAuthResult")


class AuthPort(Protocol):
    def execute_in_transaction(self, fn: Callable[[AuthPort], TAuthResult]) -> TAuthResult:
        ...

    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

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
        ...

    def update_user_profile(
        self,
        *,
        user_id: str,
        first_name: str,
        last_name: str,
        profile_picture: str | None,
        updated_at: datetime,
    ) -> User | None:
        ...

    def update_user_password(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        ...

    def get_user_by_linked_identity(self, *, provider: str, provider_id: str) -> User | None:
        ...

    def get_linked_identity(self, *, provider: str, provider_id: str) -> LinkedIdentity | None:
        ...

    def get_linked_identity_for_user_provider(
        self,
        *,
        user_id: str,
        provider: str,
    ) -> LinkedIdentity | None:
        ...

    def list_linked_identities(self, *, user_id: str) -> list[LinkedIdentity]:
        ...

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
        ...

    def create_refresh_token(
        self,
        *,
        token_id: str,
        user_id: str,
        token: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> IssuedRefreshToken:
        ...

    def get_refresh_token(self, *, token: str) -> IssuedRefreshToken | None:
        ...

    def revoke_refresh_token(self, *, token_id: str) -> bool:
        """Flip revoked to true only if it is still false. Returns whether this call did it."""
        ...
