from __future__ import annotations

from typing import Any, Protocol


class GoogleOauthPort(Protocol):
    def verify_id_token(self, *, id_token: str) -> dict[str, Any]:
        ...
