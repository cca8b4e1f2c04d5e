from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response

from authcore.api.deps import (
    get_login_google_use_case,
    get_login_local_use_case,
    get_logout_session_use_case,
    get_refresh_session_use_case,
    get_register_user_use_case,
)
from authcore.api.schemas.auth import (
    AuthTokenResponse,
    GoogleLoginRequest,
    LoginRequest,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    build_auth_user_response,
)
from authcore.application.dto.auth import (
    AuthTokensOutput,
    LoginGoogleInput,
    LoginLocalInput,
    LogoutInput,
    RefreshSessionInput,
    RegisterUserInput,
)
from authcore.application.use_cases.login_google import LoginGoogleUseCase
from authcore.application.use_cases.login_local import LoginLocalUseCase
from authcore.application.use_cases.logout_session import LogoutSessionUseCase
from authcore.application.use_cases.refresh_session import RefreshSessionUseCase
from authcore.application.use_cases.register_user import RegisterUserUseCase
from authcore.domain.exceptions import (
    EmailAlreadyExistsError,
    GoogleTokenValidationError,
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
    UnsupportedProviderError,
    UserInactiveError,
    UserNotFoundError,
)


router = APIRouter()

REFRESH_COOKIE_NAME = "refresh_token"
REFRESH_COOKIE_PATH = "/v1/auth"


def _set_refresh_cookie(request: Request, response: Response, refresh_token: str, refresh_expires_at: datetime) -> None:
    now = datetime.now(timezone.utc)
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        samesite="lax",
        secure=bool(getattr(request.app.state, "refresh_cookie_secure", False)),
        max_age=max(int((refresh_expires_at - now).total_seconds()), 0),
        path=REFRESH_COOKIE_PATH,
    )


def _auth_token_response(request: Request, response: Response, output: AuthTokensOutput) -> AuthTokenResponse:
    _set_refresh_cookie(request, response, output.refresh_token, output.refresh_expires_at)
    return AuthTokenResponse(
        access_token=output.access_token,
        refresh_token=output.refresh_token,
        access_expires_at=output.access_expires_at,
        refresh_expires_at=output.refresh_expires_at,
        user=build_auth_user_response(output.user),
    )


@router.post("/v1/auth/register", response_model=AuthTokenResponse, status_code=201)
def register_user(
    req: RegisterRequest,
    request: Request,
    response: Response,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    try:
        output = use_case.execute(
            RegisterUserInput(
                email=req.email,
                password=req.password,
                first_name=req.first_name,
                last_name=req.last_name,
            )
        )
    except EmailAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return _auth_token_response(request, response, output)


@router.post("/v1/auth/login", response_model=AuthTokenResponse)
def login_local(
    req: LoginRequest,
    request: Request,
    response: Response,
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    try:
        output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except UserInactiveError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc

    return _auth_token_response(request, response, output)


@router.post("/v1/auth/google", response_model=AuthTokenResponse)
def login_google(
    req: GoogleLoginRequest,
    request: Request,
    response: Response,
    use_case: LoginGoogleUseCase = Depends(get_login_google_use_case),
):
    try:
        output = use_case.execute(LoginGoogleInput(id_token=req.id_token))
    except GoogleTokenValidationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except EmailAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except UnsupportedProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UserInactiveError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return _auth_token_response(request, response, output)


@router.post("/v1/auth/refresh", response_model=TokenPairResponse)
def refresh_auth(
    request: Request,
    response: Response,
    req: RefreshRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    refresh_token = (req.refresh_token if req is not None else None) or refresh_token_cookie
    if not refresh_token:
        raise HTTPException(status_code=401, detail="Missing refresh token.")

    try:
        output = use_case.execute(RefreshSessionInput(refresh_token=refresh_token))
    except TokenExpiredError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except (TokenInvalidError, UserNotFoundError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except UserInactiveError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc

    _set_refresh_cookie(request, response, output.refresh_token, output.refresh_expires_at)
    return TokenPairResponse(
        access_token=output.access_token,
        refresh_token=output.refresh_token,
        access_expires_at=output.access_expires_at,
        refresh_expires_at=output.refresh_expires_at,
    )


@router.post("/v1/auth/logout", response_model=LogoutResponse)
def logout_auth(
    response: Response,
    req: LogoutRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    refresh_token = (req.refresh_token if req is not None else None) or refresh_token_cookie
    if refresh_token:
        use_case.execute(LogoutInput(refresh_token=refresh_token))
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path=REFRESH_COOKIE_PATH)
    return LogoutResponse(ok=True)
