from __future__ import annotations

from authcore.application.dto.auth import LogoutInput
from authcore.application.services.token_authority import TokenAuthority


class LogoutSessionUseCase:
    def __init__(self, *, token_authority: TokenAuthority):
        self._token_authority = token_authority

    def execute(self, command: LogoutInput) -> None:
        token = command.refresh_token.strip()
        if not token:
            return
        self._token_authority.revoke(token)
