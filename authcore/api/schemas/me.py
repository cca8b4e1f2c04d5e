from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from authcore.api.schemas.auth import AuthUserResponse


class LinkedIdentityResponse(BaseModel):
    provider: str
    provider_id: str
    created_at: datetime


class MeResponse(BaseModel):
    user: AuthUserResponse
    identities: list[LinkedIdentityResponse]


class UpdateProfileRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=120)
    last_name: str | None = Field(default=None, max_length=120)
    profile_picture: str | None = Field(default=None, max_length=2048)


class LinkGoogleRequest(BaseModel):
    id_token: str = Field(..., min_length=1)
