from __future__ import annotations

import logging

from authcore.application.ports.auth_port import AuthPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.domain.entities.user import User
from authcore.domain.exceptions import InvalidCredentialsError, UserInactiveError

from .common import normalize_email, utcnow


logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Checks email/password pairs against stored password hashes.

    Unknown email, an account without a password (created through a provider)
    and a wrong password all raise the same ``InvalidCredentialsError`` so the
    caller cannot tell which accounts exist.
    """

    def __init__(self, *, auth_port: AuthPort, password_hasher: PasswordHasherPort):
        self._auth_port = auth_port
        self._password_hasher = password_hasher

    def verify_password(self, stored_hash: str, candidate: str) -> bool:
        if not stored_hash:
            raise ValueError("stored password hash is empty.")
        return self._password_hasher.verify(candidate, stored_hash)

    def authenticate(self, *, email: str, password: str) -> User:
        normalized = normalize_email(email)
        user = self._auth_port.get_user_by_email(email=normalized) if normalized else None
        if user is None:
            logger.info("credential_verifier: login_rejected reason=unknown_email")
            raise InvalidCredentialsError("Invalid credentials.")

        if not user.password_hash:
            logger.info("credential_verifier: login_rejected reason=no_password user_id=%s", user.id)
            raise InvalidCredentialsError("Invalid credentials.")

        try:
            matched = self.verify_password(user.password_hash, password)
        except ValueError as exc:
            logger.warning(
                "credential_verifier: login_rejected reason=unusable_hash user_id=%s error=%s",
                user.id,
                type(exc).__name__,
            )
            raise InvalidCredentialsError("Invalid credentials.") from exc
        if not matched:
            logger.info("credential_verifier: login_rejected reason=mismatch user_id=%s", user.id)
            raise InvalidCredentialsError("Invalid credentials.")

        if not user.is_active:
            raise UserInactiveError("User is inactive.")

        if self._password_hasher.needs_rehash(user.password_hash):
            self._auth_port.update_user_password(
                user_id=user.id,
                password_hash=self._password_hasher.hash(password),
                updated_at=utcnow(),
            )
            logger.info("credential_verifier: password_rehashed user_id=%s", user.id)

        return user
