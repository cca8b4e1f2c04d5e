from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderProfile:
    provider_id: str
    email: str
    first_name: str
    last_name: str
    profile_picture: str | None
