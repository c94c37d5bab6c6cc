from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.dto.registration_view_dto import OrganizerStats
from src.service.registration.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)


class GetOrganizerStatsUseCase:
    def __init__(self, *, registration_query_repo: IRegistrationQueryRepo) -> None:
        self.registration_query_repo = registration_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        registration_query_repo: IRegistrationQueryRepo = Depends(
            Provide[Container.registration_query_repo]
        ),
    ) -> Self:
        return cls(registration_query_repo=registration_query_repo)

    @Logger.io
    async def get_stats(self, *, organizer_id: UUID) -> OrganizerStats:
        return await self.registration_query_repo.get_organizer_stats(
            organizer_id=organizer_id, now=utc_now()
        )
