from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.driven_adapter.model.event_model import EventModel
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.registration.driven_adapter.repo.entity_mapper import (
    event_model_to_entity,
    ticket_type_model_to_entity,
)


class EventQueryRepoImpl(IEventQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        async with self.session_factory() as session:
            result = await session.execute(select(EventModel).where(EventModel.id == event_id))
            event_model = result.scalar_one_or_none()
            return event_model_to_entity(event_model) if event_model else None

    @Logger.io
    async def get_ticket_type(self, *, ticket_type_id: int) -> Optional[TicketTypeEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketTypeModel).where(TicketTypeModel.id == ticket_type_id)
            )
            model = result.scalar_one_or_none()
            return ticket_type_model_to_entity(model) if model else None
