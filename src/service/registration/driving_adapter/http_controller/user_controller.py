from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Cookie, Depends, Header

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.command.sync_profile_use_case import SyncProfileUseCase
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from src.service.registration.driving_adapter.http_controller.schema.user_schema import (
    UserResponse,
)


# === API Router ===

router = APIRouter()


@inject
async def get_current_user(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
) -> UserEntity:
    """Current user from the bearer header or the auth cookie (stateless, no DB query)"""
    return jwt_auth.get_current_user_info_from_jwt(
        jwt_auth.extract_token(authorization=authorization, cookie_token=token)
    )


@router.get('/me', response_model=UserResponse)
@Logger.io
async def get_me(
    current_user: UserEntity = Depends(get_current_user),
    use_case: SyncProfileUseCase = Depends(SyncProfileUseCase.depends),
) -> UserResponse:
    profile = await use_case.sync(user=current_user)
    return UserResponse(
        id=profile.id,
        email=profile.email,
        display_name=profile.display_name,
        role=profile.role.value,
    )
