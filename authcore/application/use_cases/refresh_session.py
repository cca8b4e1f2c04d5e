from __future__ import annotations

from authcore.application.dto.auth import RefreshSessionInput, TokenPairOutput
from authcore.application.services.token_authority import TokenAuthority
from authcore.domain.exceptions import TokenInvalidError


class RefreshSessionUseCase:
    def __init__(self, *, token_authority: TokenAuthority):
        self._token_authority = token_authority

    def execute(self, command: RefreshSessionInput) -> TokenPairOutput:
        token = command.refresh_token.strip()
        if not token:
            raise TokenInvalidError("Missing refresh token.")
        return self._token_authority.redeem_refresh(token)
