from __future__ import annotations

import logging
from typing import Any

from google.auth.transport import requests
from google.oauth2 import id_token

from authcore.application.ports.google_oauth_port import GoogleOauthPort
from authcore.domain.exceptions import GoogleTokenValidationError


logger = logging.getLogger(__name__)


class GoogleOidcClient(GoogleOauthPort):
    def __init__(self, *, client_id: str):
        self._client_id = client_id

    def verify_id_token(self, *, id_token: str) -> dict[str, Any]:
        try:
            payload = id_token_verify(token=id_token, audience=self._client_id)
        except Exception as exc:  # pragma: no cover - depends on external validation errors
            logger.info("google_oidc_client: id_token_rejected error=%s", type(exc).__name__)
            raise GoogleTokenValidationError("Invalid Google id_token.") from exc

        if not payload.get("sub"):
            raise GoogleTokenValidationError("Google id_token missing required claims.")

        # Only trust an email Google itself has verified.
        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"

        claims = dict(payload)
        if not email_verified:
            claims["email"] = ""
        return claims


def id_token_verify(*, token: str, audience: str) -> dict:
    request = requests.Request()
    return id_token.verify_oauth2_token(token, request, audience)
