from __future__ import annotations

from authcore.application.dto.auth import (
    LinkedIdentityOutput,
    LinkGoogleIdentityInput,
    LinkIdentityInput,
)
from authcore.application.ports.google_oauth_port import GoogleOauthPort
from authcore.application.ports.provider_claims_port import ProviderRegistry
from authcore.application.services.identity_resolver import IdentityResolver

from .auth_common import build_linked_identity_output
from .login_google import GOOGLE_PROVIDER
from .login_provider import normalize_provider_claims


class LinkIdentityUseCase:
    def __init__(
        self,
        *,
        identity_resolver: IdentityResolver,
        provider_registry: ProviderRegistry,
    ):
        self._identity_resolver = identity_resolver
        self._provider_registry = provider_registry

    def execute(self, command: LinkIdentityInput) -> LinkedIdentityOutput:
        profile = normalize_provider_claims(self._provider_registry, command.provider, command.claims)
        identity = self._identity_resolver.link_additional_identity(
            command.user_id,
            command.provider,
            profile.provider_id,
            command.tokens,
        )
        return build_linked_identity_output(identity)


class LinkGoogleIdentityUseCase:
    def __init__(
        self,
        *,
        google_oauth_port: GoogleOauthPort,
        link_identity_use_case: LinkIdentityUseCase,
    ):
        self._google_oauth_port = google_oauth_port
        self._link_identity_use_case = link_identity_use_case

    def execute(self, command: LinkGoogleIdentityInput) -> LinkedIdentityOutput:
        claims = self._google_oauth_port.verify_id_token(id_token=command.id_token)
        return self._link_identity_use_case.execute(
            LinkIdentityInput(
                user_id=command.user_id,
                provider=GOOGLE_PROVIDER,
                claims=claims,
            )
        )
