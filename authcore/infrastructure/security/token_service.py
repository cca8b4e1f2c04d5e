from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from authcore.application.dto.auth import TokenPayload
from authcore.application.ports.token_port import TokenPort
from authcore.domain.entities.user import TokenKind
from authcore.domain.exceptions import TokenExpiredError, TokenInvalidError


_ALGORITHM = "HS256"
_TOKEN_KINDS = ("access", "refresh")


class JwtTokenService(TokenPort):
    def __init__(
        self,
        *,
        jwt_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
    ):
        self._jwt_secret = jwt_secret
        self._ttls = {
            "access": access_ttl,
            "refresh": refresh_ttl,
        }

    def create_token(
        self,
        *,
        user_id: str,
        email: str,
        kind: TokenKind,
        now: datetime,
    ) -> tuple[str, datetime]:
        exp = now + self._ttls[kind]
        payload = {
            "sub": user_id,
            "email": email,
            "type": kind,
            "jti": str(uuid4()),
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        token = jwt.encode(payload, self._jwt_secret, algorithm=_ALGORITHM)
        return token, exp

    def decode_token(self, *, token: str) -> TokenPayload:
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=[_ALGORITHM],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired.") from exc
        except jwt.PyJWTError as exc:
            raise TokenInvalidError("Invalid token.") from exc

        kind = payload.get("type")
        if kind not in _TOKEN_KINDS:
            raise TokenInvalidError("Invalid token type.")

        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise TokenInvalidError("Invalid token subject.")

        email = payload.get("email")
        return TokenPayload(
            subject=subject,
            email=email if isinstance(email, str) else "",
            kind=kind,
            token_id=str(payload.get("jti") or ""),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
