from datetime import datetime
from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.app.interface.i_venue_repo import IVenueRepo
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.enum.event_status import EventStatus


class UpdateEventUseCase:
    def __init__(
        self,
        *,
        event_command_repo: IEventCommandRepo,
        event_query_repo: IEventQueryRepo,
        venue_repo: IVenueRepo,
    ) -> None:
        self.event_command_repo = event_command_repo
        self.event_query_repo = event_query_repo
        self.venue_repo = venue_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_command_repo: IEventCommandRepo = Depends(Provide[Container.event_command_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        venue_repo: IVenueRepo = Depends(Provide[Container.venue_repo]),
    ) -> Self:
        return cls(
            event_command_repo=event_command_repo,
            event_query_repo=event_query_repo,
            venue_repo=venue_repo,
        )

    @Logger.io
    async def update_event(
        self,
        *,
        event_id: int,
        organizer_id: UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start_ts: Optional[datetime] = None,
        end_ts: Optional[datetime] = None,
        capacity: Optional[int] = None,
        status: Optional[EventStatus] = None,
        timezone: Optional[str] = None,
    ) -> EventEntity:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')
        event.ensure_owned_by(organizer_id)

        if capacity is not None and event.venue_id is not None:
            venue = await self.venue_repo.get_by_id(venue_id=event.venue_id)
            if venue is None:
                raise NotFoundError(f'Venue {event.venue_id} not found')
            venue.ensure_can_host(capacity)

        updated = event.update(
            title=title,
            description=description,
            start_ts=start_ts,
            end_ts=end_ts,
            capacity=capacity,
            status=status,
            timezone=timezone,
        )
        return await self.event_command_repo.update(event=updated)
