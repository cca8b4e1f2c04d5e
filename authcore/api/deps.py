from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from authcore.application.ports.provider_claims_port import ProviderRegistry
from authcore.application.services.credential_verifier import CredentialVerifier
from authcore.application.services.identity_resolver import IdentityResolver
from authcore.application.services.token_authority import TokenAuthority
from authcore.application.use_cases.get_me import GetMeUseCase
from authcore.application.use_cases.link_identity import LinkGoogleIdentityUseCase, LinkIdentityUseCase
from authcore.application.use_cases.login_google import LoginGoogleUseCase
from authcore.application.use_cases.login_local import LoginLocalUseCase
from authcore.application.use_cases.login_provider import LoginViaProviderUseCase
from authcore.application.use_cases.logout_session import LogoutSessionUseCase
from authcore.application.use_cases.refresh_session import RefreshSessionUseCase
from authcore.application.use_cases.register_user import RegisterUserUseCase
from authcore.application.use_cases.update_profile import UpdateProfileUseCase
from authcore.domain.entities.user import User
from authcore.domain.exceptions import TokenExpiredError, TokenInvalidError
from authcore.domain.services.provider_claims import build_provider_registry
from authcore.infrastructure.clients.google_oidc_client import GoogleOidcClient
from authcore.infrastructure.db.engine import get_engine
from authcore.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from authcore.infrastructure.security.password_hasher import PasswordHasher
from authcore.infrastructure.security.token_service import JwtTokenService
from authcore.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    settings = get_settings()
    return JwtTokenService(
        jwt_secret=settings.jwt_secret,
        access_ttl=settings.jwt_access_ttl,
        refresh_ttl=settings.jwt_refresh_ttl,
    )


@lru_cache(maxsize=1)
def _get_provider_registry() -> ProviderRegistry:
    return build_provider_registry(get_settings().enabled_providers)


@lru_cache(maxsize=1)
def _get_google_oauth_client() -> GoogleOidcClient:
    settings = get_settings()
    if not settings.google_client_id:
        raise HTTPException(status_code=500, detail="GOOGLE_CLIENT_ID is required.")
    return GoogleOidcClient(client_id=settings.google_client_id)


def get_token_authority() -> TokenAuthority:
    return TokenAuthority(
        auth_port=get_accounts_repository(),
        token_port=_get_token_service(),
    )


def _get_identity_resolver() -> IdentityResolver:
    return IdentityResolver(auth_port=get_accounts_repository())


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        auth_port=get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        token_authority=get_token_authority(),
    )


def get_login_local_use_case() -> LoginLocalUseCase:
    return LoginLocalUseCase(
        credential_verifier=CredentialVerifier(
            auth_port=get_accounts_repository(),
            password_hasher=_get_password_hasher(),
        ),
        token_authority=get_token_authority(),
    )


def _get_login_via_provider_use_case() -> LoginViaProviderUseCase:
    return LoginViaProviderUseCase(
        identity_resolver=_get_identity_resolver(),
        provider_registry=_get_provider_registry(),
        token_authority=get_token_authority(),
    )


def get_login_google_use_case() -> LoginGoogleUseCase:
    return LoginGoogleUseCase(
        google_oauth_port=_get_google_oauth_client(),
        login_via_provider_use_case=_get_login_via_provider_use_case(),
    )


def get_link_google_identity_use_case() -> LinkGoogleIdentityUseCase:
    return LinkGoogleIdentityUseCase(
        google_oauth_port=_get_google_oauth_client(),
        link_identity_use_case=LinkIdentityUseCase(
            identity_resolver=_get_identity_resolver(),
            provider_registry=_get_provider_registry(),
        ),
    )


def get_refresh_session_use_case() -> RefreshSessionUseCase:
    return RefreshSessionUseCase(token_authority=get_token_authority())


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase(token_authority=get_token_authority())


def get_get_me_use_case() -> GetMeUseCase:
    return GetMeUseCase(auth_port=get_accounts_repository())


def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(auth_port=get_accounts_repository())


def get_current_user(
    authorization: str | None = Header(default=None),
    token_authority: TokenAuthority = Depends(get_token_authority),
    auth_port: SqlAccountsRepository = Depends(get_accounts_repository),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")

    try:
        user_id = token_authority.verify_access_token(token)
    except TokenExpiredError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except TokenInvalidError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    user = auth_port.get_user_by_id(user_id=user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found.")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive.")
    return user
