from __future__ import annotations

from datetime import datetime
from typing import Protocol

from authcore.application.dto.auth import TokenPayload
from authcore.domain.entities.user import TokenKind


class TokenPort(Protocol):
    def create_token(
        self,
        *,
        user_id: str,
        email: str,
        kind: TokenKind,
        now: datetime,
    ) -> tuple[str, datetime]:
        ...

    def decode_token(self, *, token: str) -> TokenPayload:
        ...
