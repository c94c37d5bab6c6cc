from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.dto.registration_view_dto import RegistrationDetail
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)


class ListRegistrationsUseCase:
    """Registration history for participants and rolls for organizers, newest first"""

    def __init__(
        self,
        *,
        registration_query_repo: IRegistrationQueryRepo,
        event_query_repo: IEventQueryRepo,
    ) -> None:
        self.registration_query_repo = registration_query_repo
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        registration_query_repo: IRegistrationQueryRepo = Depends(
            Provide[Container.registration_query_repo]
        ),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
    ) -> Self:
        return cls(
            registration_query_repo=registration_query_repo, event_query_repo=event_query_repo
        )

    @Logger.io
    async def list_mine(self, *, user_id: UUID) -> List[RegistrationDetail]:
        return await self.registration_query_repo.list_user_registrations(user_id=user_id)

    @Logger.io
    async def list_event_roll(
        self, *, event_id: int, organizer_id: UUID
    ) -> List[RegistrationDetail]:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')
        event.ensure_owned_by(organizer_id)

        return await self.registration_query_repo.list_event_registrations(event_id=event_id)

    @Logger.io
    async def list_organizer_roll(self, *, organizer_id: UUID) -> List[RegistrationDetail]:
        return await self.registration_query_repo.list_organizer_registrations(
            organizer_id=organizer_id
        )
