from __future__ import annotations

import logging
from uuid import uuid4

from authcore.application.dto.auth import ProviderTokens
from authcore.application.ports.auth_port import AuthPort
from authcore.domain.entities.provider_profile import ProviderProfile
from authcore.domain.entities.user import LinkedIdentity, User
from authcore.domain.exceptions import (
    AlreadyLinkedToOtherAccountError,
    EmailAlreadyExistsError,
    ProviderAlreadyLinkedError,
    UserNotFoundError,
)

from .common import normalize_email, utcnow


logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps (provider, provider id) pairs onto canonical local users."""

    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def resolve_by_provider(self, provider: str, provider_id: str) -> User | None:
        return self._auth_port.get_user_by_linked_identity(
            provider=provider,
            provider_id=provider_id,
        )

    def resolve_or_create(
        self,
        provider: str,
        profile: ProviderProfile,
        tokens: ProviderTokens | None = None,
    ) -> User:
        existing = self.resolve_by_provider(provider, profile.provider_id)
        if existing is not None:
            return existing

        tokens = tokens or ProviderTokens()
        email = normalize_email(profile.email)

        def _tx(auth_port: AuthPort) -> tuple[User, bool]:
            linked = auth_port.get_user_by_linked_identity(provider=provider, provider_id=profile.provider_id)
            if linked is not None:
                return linked, False

            if email and auth_port.get_user_by_email(email=email) is not None:
                raise EmailAlreadyExistsError("Email already in use.")

            now = utcnow()
            user = auth_port.create_user(
                user_id=str(uuid4()),
                email=email,
                password_hash=None,
                first_name=profile.first_name,
                last_name=profile.last_name,
                profile_picture=profile.profile_picture,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            auth_port.create_linked_identity(
                identity_id=str(uuid4()),
                user_id=user.id,
                provider=provider,
                provider_id=profile.provider_id,
                provider_access_token=tokens.access_token,
                provider_refresh_token=tokens.refresh_token,
                provider_token_expiry=tokens.expires_at,
                created_at=now,
            )
            return user, True

        try:
            user, created = self._auth_port.execute_in_transaction(_tx)
        except (EmailAlreadyExistsError, AlreadyLinkedToOtherAccountError):
            # A concurrent first login for the same identity may have committed in between.
            winner = self.resolve_by_provider(provider, profile.provider_id)
            if winner is None:
                raise
            logger.info("identity_resolver: concurrent_create_resolved provider=%s user_id=%s", provider, winner.id)
            return winner

        if created:
            logger.info("identity_resolver: user_created provider=%s user_id=%s", provider, user.id)
        return user

    def link_additional_identity(
        self,
        user_id: str,
        provider: str,
        provider_id: str,
        tokens: ProviderTokens | None = None,
    ) -> LinkedIdentity:
        tokens = tokens or ProviderTokens()

        def _tx(auth_port: AuthPort) -> LinkedIdentity:
            owner = auth_port.get_linked_identity(provider=provider, provider_id=provider_id)
            if owner is not None:
                if owner.user_id != user_id:
                    raise AlreadyLinkedToOtherAccountError(
                        "This provider account is already linked to another user."
                    )
                # Re-linking the same triple is a no-op.
                return owner

            if auth_port.get_user_by_id(user_id=user_id) is None:
                raise UserNotFoundError("User not found.")

            current = auth_port.get_linked_identity_for_user_provider(user_id=user_id, provider=provider)
            if current is not None:
                raise ProviderAlreadyLinkedError(
                    f"User already has a different {provider} account linked."
                )

            return auth_port.create_linked_identity(
                identity_id=str(uuid4()),
                user_id=user_id,
                provider=provider,
                provider_id=provider_id,
                provider_access_token=tokens.access_token,
                provider_refresh_token=tokens.refresh_token,
                provider_token_expiry=tokens.expires_at,
                created_at=utcnow(),
            )

        identity = self._auth_port.execute_in_transaction(_tx)
        logger.info(
            "identity_resolver: identity_linked provider=%s user_id=%s",
            provider,
            identity.user_id,
        )
        return identity
