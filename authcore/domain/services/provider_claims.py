from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from authcore.domain.entities.provider_profile import ProviderProfile


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _first_value(items: Any) -> str:
    if not isinstance(items, list) or not items:
        return ""
    first = items[0]
    if isinstance(first, Mapping):
        return _text(first.get("value"))
    return _text(first)


def _split_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def _require_provider_id(value: Any, *, provider: str) -> str:
    provider_id = _text(value)
    if not provider_id:
        raise ValueError(f"{provider} claims are missing the provider id.")
    return provider_id


def normalize_oidc_claims(claims: Mapping[str, Any]) -> ProviderProfile:
    provider_id = _require_provider_id(claims.get("sub"), provider="oidc")
    first_name = _text(claims.get("given_name"))
    last_name = _text(claims.get("family_name"))
    if not first_name and not last_name:
        first_name, last_name = _split_name(_text(claims.get("name")))
    picture = _text(claims.get("picture"))
    return ProviderProfile(
        provider_id=provider_id,
        email=_text(claims.get("email")).lower(),
        first_name=first_name,
        last_name=last_name,
        profile_picture=picture or None,
    )


def normalize_passport_profile(claims: Mapping[str, Any]) -> ProviderProfile:
    """Normalize a passport-style profile.

    Accepts the nested shape (``emails[0].value``, ``name.givenName``,
    ``photos[0].value``) and falls back to flat ``email``, ``first_name``,
    ``last_name`` and ``picture`` keys.
    """
    provider_id = _require_provider_id(claims.get("id"), provider="passport")

    email = _first_value(claims.get("emails")) or _text(claims.get("email"))

    name = claims.get("name")
    if isinstance(name, Mapping):
        first_name = _text(name.get("givenName"))
        last_name = _text(name.get("familyName"))
    else:
        first_name, last_name = _split_name(_text(name))
    first_name = first_name or _text(claims.get("first_name"))
    last_name = last_name or _text(claims.get("last_name"))

    picture = _first_value(claims.get("photos"))
    if not picture:
        raw_picture = claims.get("picture")
        if isinstance(raw_picture, Mapping):
            # facebook graph shape: {"data": {"url": ...}}
            data = raw_picture.get("data")
            raw_picture = data.get("url") if isinstance(data, Mapping) else None
        picture = _text(raw_picture)

    return ProviderProfile(
        provider_id=provider_id,
        email=email.lower(),
        first_name=first_name,
        last_name=last_name,
        profile_picture=picture or None,
    )


DEFAULT_NORMALIZERS: dict[str, Callable[[Mapping[str, Any]], ProviderProfile]] = {
    "google": normalize_oidc_claims,
    "facebook": normalize_passport_profile,
    "linkedin": normalize_passport_profile,
}


def build_provider_registry(
    enabled: Iterable[str],
) -> dict[str, Callable[[Mapping[str, Any]], ProviderProfile]]:
    registry: dict[str, Callable[[Mapping[str, Any]], ProviderProfile]] = {}
    for provider in enabled:
        normalizer = DEFAULT_NORMALIZERS.get(provider)
        if normalizer is None:
            raise ValueError(f"No claims normalizer for provider '{provider}'.")
        registry[provider] = normalizer
    return registry
