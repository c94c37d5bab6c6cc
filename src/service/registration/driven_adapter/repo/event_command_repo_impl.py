from typing import AsyncContextManager, Callable, List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.driven_adapter.model.event_model import EventModel
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.registration.driven_adapter.repo.entity_mapper import (
    event_model_to_entity,
    ticket_type_model_to_entity,
)


class EventCommandRepoImpl(IEventCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create_with_ticket_types(
        self, *, event: EventEntity, ticket_types: List[TicketTypeEntity]
    ) -> EventEntity:
        now = utc_now()
        event_model = EventModel(
            title=event.title,
            description=event.description,
            venue_id=event.venue_id,
            venue_name=event.venue_name,
            venue_location=event.venue_location,
            start_ts=event.start_ts,
            end_ts=event.end_ts,
            capacity=event.capacity,
            timezone=event.timezone,
            recurrence_rule=event.recurrence_rule,
            status=event.status.value,
            organizer_id=event.organizer_id,
            created_at=event.created_at or now,
            updated_at=event.updated_at or now,
            ticket_types=[self._ticket_type_to_model(t) for t in ticket_types],
        )

        async with self.session_factory() as session:
            session.add(event_model)
            await session.commit()

        Logger.base.info(
            f'🗓️ [EVENT] Created event {event_model.id} with {len(ticket_types)} ticket types'
        )
        return event_model_to_entity(event_model)

    @Logger.io
    async def update(self, *, event: EventEntity) -> EventEntity:
        async with self.session_factory() as session:
            event_model = await session.get(EventModel, event.id)
            if event_model is None:
                raise NotFoundError(f'Event {event.id} not found')

            event_model.title = event.title
            event_model.description = event.description
            event_model.start_ts = event.start_ts
            event_model.end_ts = event.end_ts
            event_model.capacity = event.capacity
            event_model.timezone = event.timezone
            event_model.status = event.status.value
            event_model.updated_at = event.updated_at or utc_now()
            await session.commit()

            return event_model_to_entity(event_model)

    @Logger.io
    async def add_ticket_type(self, *, ticket_type: TicketTypeEntity) -> TicketTypeEntity:
        model = self._ticket_type_to_model(ticket_type)
        model.event_id = ticket_type.event_id

        async with self.session_factory() as session:
            session.add(model)
            await session.commit()

        return ticket_type_model_to_entity(model)

    @Logger.io
    async def delete(self, *, event_id: int) -> bool:
        # ticket_type and capacity_reservation rows go through ON DELETE CASCADE
        async with self.session_factory() as session:
            result = await session.execute(
                delete(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0

    @staticmethod
    def _ticket_type_to_model(ticket_type: TicketTypeEntity) -> TicketTypeModel:
        return TicketTypeModel(
            name=ticket_type.name,
            description=ticket_type.description,
            kind=ticket_type.kind.value,
            price=ticket_type.price,
            capacity=ticket_type.capacity,
            sold_count=0,
            waitlist_enabled=ticket_type.waitlist_enabled,
            created_at=ticket_type.created_at or utc_now(),
        )
