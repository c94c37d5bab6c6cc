from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.interface.i_profile_repo import IProfileRepo
from src.service.registration.domain.entity.user_entity import UserEntity


class SyncProfileUseCase:
    """Store the identity carried by the token so rolls can show who registered"""

    def __init__(self, *, profile_repo: IProfileRepo) -> None:
        self.profile_repo = profile_repo

    @classmethod
    @inject
    def depends(cls, profile_repo: IProfileRepo = Depends(Provide[Container.profile_repo])) -> Self:
        return cls(profile_repo=profile_repo)

    @Logger.io
    async def sync(self, *, user: UserEntity) -> UserEntity:
        return await self.profile_repo.upsert(user=user)
