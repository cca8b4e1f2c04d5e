from __future__ import annotations

from authcore.application.dto.auth import AuthTokensOutput, LoginGoogleInput, LoginProviderInput
from authcore.application.ports.google_oauth_port import GoogleOauthPort

from .login_provider import LoginViaProviderUseCase


GOOGLE_PROVIDER = "google"


class LoginGoogleUseCase:
    def __init__(
        self,
        *,
        google_oauth_port: GoogleOauthPort,
        login_via_provider_use_case: LoginViaProviderUseCase,
    ):
        self._google_oauth_port = google_oauth_port
        self._login_via_provider_use_case = login_via_provider_use_case

    def execute(self, command: LoginGoogleInput) -> AuthTokensOutput:
        claims = self._google_oauth_port.verify_id_token(id_token=command.id_token)
        return self._login_via_provider_use_case.execute(
            LoginProviderInput(provider=GOOGLE_PROVIDER, claims=claims)
        )
