from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.dto.registration_view_dto import EventAvailability
from src.service.registration.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)


class ListEventsUseCase:
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
    async def list_open(self) -> List[EventAvailability]:
        """Active events that have not started yet, soonest first"""
        return await self.registration_query_repo.list_open_events(now=utc_now())

    @Logger.io
    async def list_by_organizer(self, *, organizer_id: UUID) -> List[EventAvailability]:
        return await self.registration_query_repo.list_events_by_organizer(
            organizer_id=organizer_id
        )

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> EventAvailability:
        event = await self.registration_query_repo.get_event_availability(event_id=event_id)
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')
        return event
