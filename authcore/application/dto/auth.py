from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from authcore.domain.entities.user import TokenKind


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    email: str
    first_name: str
    last_name: str
    profile_picture: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class RegisterUserInput:
    email: str
    password: str
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True)
class LoginLocalInput:
    email: str
    password: str


@dataclass(frozen=True)
class ProviderTokens:
    access_token: str = ""
    refresh_token: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class LoginProviderInput:
    provider: str
    claims: Mapping[str, Any]
    tokens: ProviderTokens = field(default_factory=ProviderTokens)


@dataclass(frozen=True)
class LoginGoogleInput:
    id_token: str


@dataclass(frozen=True)
class LinkIdentityInput:
    user_id: str
    provider: str
    claims: Mapping[str, Any]
    tokens: ProviderTokens = field(default_factory=ProviderTokens)


@dataclass(frozen=True)
class LinkGoogleIdentityInput:
    user_id: str
    id_token: str


@dataclass(frozen=True)
class RefreshSessionInput:
    refresh_token: str


@dataclass(frozen=True)
class LogoutInput:
    refresh_token: str


@dataclass(frozen=True)
class UpdateProfileInput:
    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    profile_picture: str | None = None


@dataclass(frozen=True)
class TokenPairOutput:
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


@dataclass(frozen=True)
class AuthTokensOutput:
    user: AuthUserOutput
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


@dataclass(frozen=True)
class LinkedIdentityOutput:
    provider: str
    provider_id: str
    created_at: datetime


@dataclass(frozen=True)
class MeOutput:
    user: AuthUserOutput
    identities: list[LinkedIdentityOutput]


@dataclass(frozen=True)
class TokenPayload:
    subject: str
    email: str
    kind: TokenKind
    token_id: str
    issued_at: datetime
    expires_at: datetime
