from __future__ import annotations

from authcore.application.dto.auth import AuthUserOutput, UpdateProfileInput
from authcore.application.ports.auth_port import AuthPort
from authcore.application.services.common import utcnow
from authcore.domain.exceptions import UserNotFoundError

from .auth_common import build_auth_user_output
from .register_user import MAX_NAME_LENGTH


class UpdateProfileUseCase:
    """Edits display fields only. Email, password and id are not editable here."""

    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, command: UpdateProfileInput) -> AuthUserOutput:
        def _tx(auth_port: AuthPort) -> AuthUserOutput:
            user = auth_port.get_user_by_id(user_id=command.user_id)
            if user is None:
                raise UserNotFoundError("User not found.")

            first_name = user.first_name if command.first_name is None else command.first_name.strip()
            last_name = user.last_name if command.last_name is None else command.last_name.strip()
            if len(first_name) > MAX_NAME_LENGTH or len(last_name) > MAX_NAME_LENGTH:
                raise ValueError(f"names must have at most {MAX_NAME_LENGTH} characters.")

            profile_picture = user.profile_picture
            if command.profile_picture is not None:
                profile_picture = command.profile_picture.strip() or None

            updated = auth_port.update_user_profile(
                user_id=user.id,
                first_name=first_name,
                last_name=last_name,
                profile_picture=profile_picture,
                updated_at=utcnow(),
            )
            if updated is None:
                raise UserNotFoundError("User not found.")
            return build_auth_user_output(updated)

        return self._auth_port.execute_in_transaction(_tx)
