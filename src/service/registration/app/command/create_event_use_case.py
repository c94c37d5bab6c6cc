from datetime import datetime
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.dto.ticket_type_definition_dto import TicketTypeDefinition
from src.service.registration.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.registration.app.interface.i_venue_repo import IVenueRepo
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.ticket_kind import TicketKind


class CreateEventUseCase:
    """
    Create an event together with its ticket types.

    Without ticket types the event gets a single free one named after
    DEFAULT_TICKET_TYPE_NAME, sized to the event capacity, else the venue
    capacity, else unlimited.
    """

    def __init__(self, *, event_command_repo: IEventCommandRepo, venue_repo: IVenueRepo) -> None:
        self.event_command_repo = event_command_repo
        self.venue_repo = venue_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        event_command_repo: IEventCommandRepo = Depends(Provide[Container.event_command_repo]),
        venue_repo: IVenueRepo = Depends(Provide[Container.venue_repo]),
    ) -> Self:
        return cls(event_command_repo=event_command_repo, venue_repo=venue_repo)

    @Logger.io
    async def create_event(
        self,
        *,
        organizer_id: UUID,
        title: str,
        start_ts: datetime,
        end_ts: datetime,
        description: Optional[str] = None,
        venue_id: Optional[int] = None,
        venue_name: Optional[str] = None,
        venue_location: Optional[str] = None,
        capacity: Optional[int] = None,
        timezone: str = 'UTC',
        recurrence_rule: Optional[str] = None,
        status: EventStatus = EventStatus.ACTIVE,
        ticket_types: Optional[List[TicketTypeDefinition]] = None,
    ) -> EventEntity:
        with self.tracer.start_as_current_span(
            'use_case.create_event', attributes={'organizer.id': str(organizer_id)}
        ):
            venue_capacity: Optional[int] = None
            if venue_id is not None:
                venue = await self.venue_repo.get_by_id(venue_id=venue_id)
                if venue is None:
                    raise NotFoundError(f'Venue {venue_id} not found')
                venue.ensure_owned_by(organizer_id)
                venue_name, venue_location = venue.name, venue.location
                venue_capacity = venue.capacity
                venue.ensure_can_host(capacity)

            event = EventEntity.create(
                title=title,
                organizer_id=organizer_id,
                start_ts=start_ts,
                end_ts=end_ts,
                description=description,
                venue_id=venue_id,
                venue_name=venue_name,
                venue_location=venue_location,
                capacity=capacity,
                timezone=timezone,
                recurrence_rule=recurrence_rule,
                status=status,
            )

            definitions = ticket_types or [
                TicketTypeDefinition(
                    name=settings.DEFAULT_TICKET_TYPE_NAME,
                    kind=TicketKind.FREE,
                    price=0,
                    capacity=capacity if capacity is not None else venue_capacity,
                )
            ]
            ticket_type_entities = [
                TicketTypeEntity.create(
                    event_id=None,
                    name=d.name,
                    kind=d.kind,
                    price=d.price,
                    capacity=d.capacity,
                    waitlist_enabled=d.waitlist_enabled,
                    description=d.description,
                )
                for d in definitions
            ]

            return await self.event_command_repo.create_with_ticket_types(
                event=event, ticket_types=ticket_type_entities
            )
