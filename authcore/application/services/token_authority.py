from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from uuid import uuid4

from authcore.application.dto.auth import TokenPairOutput, TokenPayload
from authcore.application.ports.auth_port import AuthPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain.entities.user import TokenKind, User
from authcore.domain.exceptions import TokenInvalidError, UserInactiveError, UserNotFoundError

from .common import utcnow


logger = logging.getLogger(__name__)


class TokenAuthority:
    """Mints, verifies, rotates and revokes access/refresh token pairs.

    Every refresh token handed out has a matching ``refresh_tokens`` row.
    A row moves from active to revoked exactly once, either when the token is
    redeemed for a new pair or when the user logs out with it. Expired rows
    stay where they are and simply stop being redeemable.
    """

    def __init__(
        self,
        *,
        auth_port: AuthPort,
        token_port: TokenPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._auth_port = auth_port
        self._token_port = token_port
        self._clock = clock

    def mint_pair(self, user: User, *, auth_port: AuthPort | None = None) -> TokenPairOutput:
        store = auth_port or self._auth_port
        now = self._clock()
        access_token, access_expires_at = self._token_port.create_token(
            user_id=user.id,
            email=user.email,
            kind="access",
            now=now,
        )
        refresh_token, refresh_expires_at = self._token_port.create_token(
            user_id=user.id,
            email=user.email,
            kind="refresh",
            now=now,
        )
        store.create_refresh_token(
            token_id=str(uuid4()),
            user_id=user.id,
            token=refresh_token,
            expires_at=refresh_expires_at,
            created_at=now,
        )
        return TokenPairOutput(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_expires_at,
            refresh_expires_at=refresh_expires_at,
        )

    def verify(self, token: str, *, kind: TokenKind | None = None) -> TokenPayload:
        payload = self._token_port.decode_token(token=token)
        if kind is not None and payload.kind != kind:
            raise TokenInvalidError("Invalid token type.")
        return payload

    def verify_access_token(self, token: str) -> str:
        return self.verify(token, kind="access").subject

    def redeem_refresh(self, presented_token: str) -> TokenPairOutput:
        payload = self.verify(presented_token, kind="refresh")

        def _tx(auth_port: AuthPort) -> TokenPairOutput:
            now = self._clock()
            record = auth_port.get_refresh_token(token=presented_token)
            # Missing, revoked and expired rows are reported identically.
            if record is None or not record.is_redeemable(now=now):
                raise TokenInvalidError("Invalid refresh token.")
            if record.user_id != payload.subject:
                raise TokenInvalidError("Invalid refresh token.")

            user = auth_port.get_user_by_id(user_id=payload.subject)
            if user is None:
                raise UserNotFoundError("User not found.")
            if not user.is_active:
                raise UserInactiveError("User is inactive.")

            if not auth_port.revoke_refresh_token(token_id=record.id):
                # A concurrent redemption of the same token committed first.
                logger.warning(
                    "token_authority: refresh_race_lost user_id=%s token_id=%s",
                    user.id,
                    record.id,
                )
                raise TokenInvalidError("Invalid refresh token.")

            return self.mint_pair(user, auth_port=auth_port)

        pair = self._auth_port.execute_in_transaction(_tx)
        logger.info("token_authority: refresh_rotated user_id=%s", payload.subject)
        return pair

    def revoke(self, presented_token: str) -> None:
        record = self._auth_port.get_refresh_token(token=presented_token)
        if record is None or record.revoked:
            return
        if self._auth_port.revoke_refresh_token(token_id=record.id):
            logger.info("token_authority: refresh_revoked user_id=%s", record.user_id)
