from __future__ import annotations

import logging
from uuid import uuid4

from authcore.application.dto.auth import AuthTokensOutput, RegisterUserInput
from authcore.application.ports.auth_port import AuthPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.application.services.common import normalize_email, utcnow
from authcore.application.services.token_authority import TokenAuthority
from authcore.domain.entities.user import User
from authcore.domain.exceptions import EmailAlreadyExistsError

from .auth_common import issue_session


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 120


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        password_hasher: PasswordHasherPort,
        token_authority: TokenAuthority,
    ):
        self._auth_port = auth_port
        self._password_hasher = password_hasher
        self._token_authority = token_authority

    def execute(self, command: RegisterUserInput) -> AuthTokensOutput:
        email = normalize_email(command.email)
        first_name = command.first_name.strip()
        last_name = command.last_name.strip()
        password = command.password

        if not email or "@" not in email:
            raise ValueError("a valid email is required.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must have at least {MIN_PASSWORD_LENGTH} characters.")
        if len(first_name) > MAX_NAME_LENGTH or len(last_name) > MAX_NAME_LENGTH:
            raise ValueError(f"names must have at most {MAX_NAME_LENGTH} characters.")

        password_hash = self._password_hasher.hash(password)

        def _tx(auth_port: AuthPort) -> User:
            if auth_port.get_user_by_email(email=email) is not None:
                raise EmailAlreadyExistsError("Email already in use.")

            now = utcnow()
            return auth_port.create_user(
                user_id=str(uuid4()),
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                profile_picture=None,
                is_active=True,
                created_at=now,
                updated_at=now,
            )

        user = self._auth_port.execute_in_transaction(_tx)
        logger.info("register_user: user_registered user_id=%s", user.id)
        return issue_session(user=user, token_authority=self._token_authority)
