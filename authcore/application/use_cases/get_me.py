from __future__ import annotations

from authcore.application.dto.auth import MeOutput
from authcore.application.ports.auth_port import AuthPort
from authcore.domain.entities.user import User

from .auth_common import build_auth_user_output, build_linked_identity_output


class GetMeUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, *, user: User) -> MeOutput:
        identities = self._auth_port.list_linked_identities(user_id=user.id)
        return MeOutput(
            user=build_auth_user_output(user),
            identities=[build_linked_identity_output(identity) for identity in identities],
        )
