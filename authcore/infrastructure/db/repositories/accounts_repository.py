from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from authcore.application.ports.auth_port import AuthPort
from authcore.domain.exceptions import (
    AlreadyLinkedToOtherAccountError,
    EmailAlreadyExistsError,
    ProviderAlreadyLinkedError,
)
from authcore.infrastructure.db.mappers.accounts_mapper import (
    map_row_to_linked_identity,
    map_row_to_refresh_token,
    map_row_to_user,
)


logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "id, email, password, first_name, last_name, profile_picture, is_active, created_at, updated_at"
)
_IDENTITY_COLUMNS = (
    "id, user_id, provider, provider_id, provider_access_token, provider_refresh_token, "
    "provider_token_expiry, created_at, updated_at"
)
_REFRESH_TOKEN_COLUMNS = "id, user_id, token, expires_at, revoked, created_at"


class SqlAccountsRepository(AuthPort):
    """Users, linked identities and refresh tokens over parameterized SQL.

    Outside ``execute_in_transaction`` every write commits on its own. Inside
    it, the repository is bound to a single connection and all statements
    commit or roll back together.
    """

    def __init__(self, engine, *, connection=None):
        self._engine = engine
        self._connection = connection

    @contextmanager
    def _reading(self):
        if self._connection is not None:
            yield self._connection
            return
        with self._engine.connect() as conn:
            yield conn

    @contextmanager
    def _writing(self):
        if self._connection is not None:
            yield self._connection
            return
        with self._engine.begin() as conn:
            yield conn

    def execute_in_transaction(self, fn):
        if self._connection is not None:
            return fn(self)
        with self._engine.begin() as conn:
            return fn(SqlAccountsRepository(self._engine, connection=conn))

    def get_user_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._reading() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_email(self, *, email: str):
        if not email:
            return None
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with self._reading() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

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
    ):
        sql = f"""
            INSERT INTO users (
                id, email, password, first_name, last_name, profile_picture, is_active, created_at, updated_at
            ) VALUES (
                :id, :email, :password, :first_name, :last_name, :profile_picture, :is_active,
                :created_at, :updated_at
            )
            RETURNING {_USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "email": email or None,
            "password": password_hash,
            "first_name": first_name,
            "last_name": last_name,
            "profile_picture": profile_picture,
            "is_active": is_active,
            "created_at": created_at,
            "updated_at": updated_at,
        }
        try:
            with self._writing() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            logger.info("accounts_repository: create_user_conflict user_id=%s", user_id)
            raise EmailAlreadyExistsError("Email already in use.") from exc
        return map_row_to_user(row)

    def update_user_profile(
        self,
        *,
        user_id: str,
        first_name: str,
        last_name: str,
        profile_picture: str | None,
        updated_at: datetime,
    ):
        sql = f"""
            UPDATE users
            SET first_name = :first_name,
                last_name = :last_name,
                profile_picture = :profile_picture,
                updated_at = :updated_at
            WHERE id = :user_id
            RETURNING {_USER_COLUMNS}
        """
        with self._writing() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "first_name": first_name,
                    "last_name": last_name,
                    "profile_picture": profile_picture,
                    "updated_at": updated_at,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def update_user_password(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        sql = """
            UPDATE users
            SET password = :password,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with self._writing() as conn:
            conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "password": password_hash,
                    "updated_at": updated_at,
                },
            )

    def get_user_by_linked_identity(self, *, provider: str, provider_id: str):
        sql = """
            SELECT
                u.id,
                u.email,
                u.password,
                u.first_name,
                u.last_name,
                u.profile_picture,
                u.is_active,
                u.created_at,
                u.updated_at
            FROM users u
            JOIN social_accounts sa
              ON sa.user_id = u.id
            WHERE sa.provider = :provider
              AND sa.provider_id = :provider_id
            LIMIT 1
        """
        with self._reading() as conn:
            row = conn.execute(
                text(sql),
                {
                    "provider": provider,
                    "provider_id": provider_id,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_linked_identity(self, *, provider: str, provider_id: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM social_accounts
            WHERE provider = :provider
              AND provider_id = :provider_id
            LIMIT 1
        """
        with self._reading() as conn:
            row = conn.execute(
                text(sql),
                {
                    "provider": provider,
                    "provider_id": provider_id,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_linked_identity(row)

    def get_linked_identity_for_user_provider(self, *, user_id: str, provider: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM social_accounts
            WHERE user_id = :user_id
              AND provider = :provider
            LIMIT 1
        """
        with self._reading() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "provider": provider,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_linked_identity(row)

    def list_linked_identities(self, *, user_id: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM social_accounts
            WHERE user_id = :user_id
            ORDER BY created_at, provider
        """
        with self._reading() as conn:
            rows = conn.execute(text(sql), {"user_id": user_id}).mappings().all()
        return [map_row_to_linked_identity(row) for row in rows]

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
    ):
        sql = f"""
            INSERT INTO social_accounts (
                id, user_id, provider, provider_id,
                provider_access_token, provider_refresh_token, provider_token_expiry,
                created_at, updated_at
            ) VALUES (
                :id, :user_id, :provider, :provider_id,
                :provider_access_token, :provider_refresh_token, :provider_token_expiry,
                :created_at, :updated_at
            )
            RETURNING {_IDENTITY_COLUMNS}
        """
        params = {
            "id": identity_id,
            "user_id": user_id,
            "provider": provider,
            "provider_id": provider_id,
            "provider_access_token": provider_access_token or "",
            "provider_refresh_token": provider_refresh_token,
            "provider_token_expiry": provider_token_expiry,
            "created_at": created_at,
            "updated_at": created_at,
        }
        try:
            with self._writing() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            message = str(exc.orig)
            logger.info(
                "accounts_repository: create_linked_identity_conflict provider=%s user_id=%s",
                provider,
                user_id,
            )
            if "uq_social_accounts_user_provider" in message or "social_accounts.user_id" in message:
                raise ProviderAlreadyLinkedError(
                    f"User already has a different {provider} account linked."
                ) from exc
            raise AlreadyLinkedToOtherAccountError(
                "This provider account is already linked to another user."
            ) from exc
        return map_row_to_linked_identity(row)

    def create_refresh_token(
        self,
        *,
        token_id: str,
        user_id: str,
        token: str,
        expires_at: datetime,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO refresh_tokens (
                id, user_id, token, expires_at, revoked, created_at
            ) VALUES (
                :id, :user_id, :token, :expires_at, false, :created_at
            )
            RETURNING {_REFRESH_TOKEN_COLUMNS}
        """
        params = {
            "id": token_id,
            "user_id": user_id,
            "token": token,
            "expires_at": expires_at,
            "created_at": created_at,
        }
        with self._writing() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_refresh_token(row)

    def get_refresh_token(self, *, token: str):
        sql = f"""
            SELECT {_REFRESH_TOKEN_COLUMNS}
            FROM refresh_tokens
            WHERE token = :token
            LIMIT 1
        """
        with self._reading() as conn:
            row = conn.execute(text(sql), {"token": token}).mappings().first()
        if row is None:
            return None
        return map_row_to_refresh_token(row)

    def revoke_refresh_token(self, *, token_id: str) -> bool:
        sql = """
            UPDATE refresh_tokens
            SET revoked = true
            WHERE id = :token_id
              AND revoked = false
        """
        with self._writing() as conn:
            result = conn.execute(text(sql), {"token_id": token_id})
        return result.rowcount == 1
