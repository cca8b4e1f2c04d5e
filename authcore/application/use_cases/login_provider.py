from __future__ import annotations

import logging

from authcore.application.dto.auth import AuthTokensOutput, LoginProviderInput
from authcore.application.ports.provider_claims_port import ProviderRegistry
from authcore.application.services.identity_resolver import IdentityResolver
from authcore.application.services.token_authority import TokenAuthority
from authcore.domain.entities.provider_profile import ProviderProfile
from authcore.domain.exceptions import UnsupportedProviderError, UserInactiveError

from .auth_common import issue_session


logger = logging.getLogger(__name__)


def normalize_provider_claims(
    provider_registry: ProviderRegistry,
    provider: str,
    claims,
) -> ProviderProfile:
    normalizer = provider_registry.get(provider)
    if normalizer is None:
        raise UnsupportedProviderError(f"Provider '{provider}' is not supported.")
    return normalizer(claims)


class LoginViaProviderUseCase:
    def __init__(
        self,
        *,
        identity_resolver: IdentityResolver,
        provider_registry: ProviderRegistry,
        token_authority: TokenAuthority,
    ):
        self._identity_resolver = identity_resolver
        self._provider_registry = provider_registry
        self._token_authority = token_authority

    def execute(self, command: LoginProviderInput) -> AuthTokensOutput:
        profile = normalize_provider_claims(self._provider_registry, command.provider, command.claims)
        user = self._identity_resolver.resolve_or_create(command.provider, profile, command.tokens)

        if not user.is_active:
            raise UserInactiveError("User is inactive.")

        logger.info("login_provider: login provider=%s user_id=%s", command.provider, user.id)
        return issue_session(user=user, token_authority=self._token_authority)
