from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.dto.ticket_type_definition_dto import TicketTypeDefinition
from src.service.registration.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity


class AddTicketTypeUseCase:
    def __init__(
        self, *, event_command_repo: IEventCommandRepo, event_query_repo: IEventQueryRepo
    ) -> None:
        self.event_command_repo = event_command_repo
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_command_repo: IEventCommandRepo = Depends(Provide[Container.event_command_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
    ) -> Self:
        return cls(event_command_repo=event_command_repo, event_query_repo=event_query_repo)

    @Logger.io
    async def add_ticket_type(
        self, *, event_id: int, organizer_id: UUID, definition: TicketTypeDefinition
    ) -> TicketTypeEntity:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')
        event.ensure_owned_by(organizer_id)

        ticket_type = TicketTypeEntity.create(
            event_id=event_id,
            name=definition.name,
            kind=definition.kind,
            price=definition.price,
            capacity=definition.capacity,
            waitlist_enabled=definition.waitlist_enabled,
            description=definition.description,
        )
        return await self.event_command_repo.add_ticket_type(ticket_type=ticket_type)
