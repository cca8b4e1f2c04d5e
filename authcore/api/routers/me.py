from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from authcore.api.deps import (
    get_current_user,
    get_get_me_use_case,
    get_link_google_identity_use_case,
    get_update_profile_use_case,
)
from authcore.api.schemas.auth import AuthUserResponse, build_auth_user_response
from authcore.api.schemas.me import (
    LinkedIdentityResponse,
    LinkGoogleRequest,
    MeResponse,
    UpdateProfileRequest,
)
from authcore.application.dto.auth import LinkGoogleIdentityInput, UpdateProfileInput
from authcore.application.use_cases.get_me import GetMeUseCase
from authcore.application.use_cases.link_identity import LinkGoogleIdentityUseCase
from authcore.application.use_cases.update_profile import UpdateProfileUseCase
from authcore.domain.entities.user import User
from authcore.domain.exceptions import (
    AlreadyLinkedToOtherAccountError,
    GoogleTokenValidationError,
    ProviderAlreadyLinkedError,
    UnsupportedProviderError,
    UserNotFoundError,
)


router = APIRouter()


@router.get("/v1/me", response_model=MeResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    output = use_case.execute(user=current_user)
    return MeResponse(
        user=build_auth_user_response(output.user),
        identities=[
            LinkedIdentityResponse(
                provider=identity.provider,
                provider_id=identity.provider_id,
                created_at=identity.created_at,
            )
            for identity in output.identities
        ],
    )


@router.patch("/v1/me", response_model=AuthUserResponse)
def update_me(
    req: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    try:
        output = use_case.execute(
            UpdateProfileInput(
                user_id=current_user.id,
                first_name=req.first_name,
                last_name=req.last_name,
                profile_picture=req.profile_picture,
            )
        )
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return build_auth_user_response(output)


@router.post("/v1/me/identities/google", response_model=LinkedIdentityResponse, status_code=201)
def link_google_identity(
    req: LinkGoogleRequest,
    current_user: User = Depends(get_current_user),
    use_case: LinkGoogleIdentityUseCase = Depends(get_link_google_identity_use_case),
):
    try:
        output = use_case.execute(LinkGoogleIdentityInput(user_id=current_user.id, id_token=req.id_token))
    except GoogleTokenValidationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except (AlreadyLinkedToOtherAccountError, ProviderAlreadyLinkedError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except UnsupportedProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return LinkedIdentityResponse(
        provider=output.provider,
        provider_id=output.provider_id,
        created_at=output.created_at,
    )
