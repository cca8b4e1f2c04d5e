from __future__ import annotations

from authcore.application.dto.auth import AuthTokensOutput, LoginLocalInput
from authcore.application.services.credential_verifier import CredentialVerifier
from authcore.application.services.token_authority import TokenAuthority

from .auth_common import issue_session


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        credential_verifier: CredentialVerifier,
        token_authority: TokenAuthority,
    ):
        self._credential_verifier = credential_verifier
        self._token_authority = token_authority

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        user = self._credential_verifier.authenticate(
            email=command.email,
            password=command.password,
        )
        return issue_session(user=user, token_authority=self._token_authority)
