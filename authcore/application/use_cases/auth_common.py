from __future__ import annotations

from authcore.application.dto.auth import AuthTokensOutput, AuthUserOutput, LinkedIdentityOutput
from authcore.application.services.token_authority import TokenAuthority
from authcore.domain.entities.user import LinkedIdentity, User


def build_auth_user_output(user: User) -> AuthUserOutput:
    # AuthUserOutput has no password_hash field.
    return AuthUserOutput(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        profile_picture=user.profile_picture,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def build_linked_identity_output(identity: LinkedIdentity) -> LinkedIdentityOutput:
    return LinkedIdentityOutput(
        provider=identity.provider,
        provider_id=identity.provider_id,
        created_at=identity.created_at,
    )


def issue_session(*, user: User, token_authority: TokenAuthority) -> AuthTokensOutput:
    pair = token_authority.mint_pair(user)
    return AuthTokensOutput(
        user=build_auth_user_output(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        access_expires_at=pair.access_expires_at,
        refresh_expires_at=pair.refresh_expires_at,
    )
