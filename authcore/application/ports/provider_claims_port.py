from __future__ import annotations

from typing import Any, Callable, Mapping

from authcore.domain.entities.provider_profile import ProviderProfile


ClaimsNormalizer = Callable[[Mapping[str, Any]], ProviderProfile]

ProviderRegistry = Mapping[str, ClaimsNormalizer]
