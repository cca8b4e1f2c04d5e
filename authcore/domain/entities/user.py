from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


TokenKind = Literal["access", "refresh"]


@dataclass(frozen=True)
class User:
    id: str
    email: str
    password_hash: str | None
    first_name: str
    last_name: str
    profile_picture: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class LinkedIdentity:
    id: str
    user_id: str
    provider: str
    provider_id: str
    provider_access_token: str
    provider_refresh_token: str | None
    provider_token_expiry: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class IssuedRefreshToken:
    id: str
    user_id: str
    token: str
    expires_at: datetime
    revoked: bool
    created_at: datetime

    def is_redeemable(self, *, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now
