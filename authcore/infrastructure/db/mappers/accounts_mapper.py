from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from authcore.domain.entities.user import IssuedRefreshToken, LinkedIdentity, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_datetime(value: Any) -> datetime:
    # Drivers without a native timestamp type hand back ISO strings and/or naive values.
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _as_optional_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    return _as_datetime(value)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        email=row.get("email") or "",
        password_hash=row.get("password") or None,
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        profile_picture=row.get("profile_picture") or None,
        is_active=bool(row["is_active"]),
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )


def map_row_to_linked_identity(row: Mapping[str, Any]) -> LinkedIdentity:
    return LinkedIdentity(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        provider=row["provider"],
        provider_id=_as_str(row["provider_id"]),
        provider_access_token=row.get("provider_access_token") or "",
        provider_refresh_token=row.get("provider_refresh_token") or None,
        provider_token_expiry=_as_optional_datetime(row.get("provider_token_expiry")),
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )


def map_row_to_refresh_token(row: Mapping[str, Any]) -> IssuedRefreshToken:
    return IssuedRefreshToken(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        token=row["token"],
        expires_at=_as_datetime(row["expires_at"]),
        revoked=bool(row["revoked"]),
        created_at=_as_datetime(row["created_at"]),
    )
