from abc import ABC, abstractmethod
from typing import List

from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity


class IEventCommandRepo(ABC):
    @abstractmethod
    async def create_with_ticket_types(
        self, *, event: EventEntity, ticket_types: List[TicketTypeEntity]
    ) -> EventEntity:
        """Persist the event and its ticket types in one transaction"""

    @abstractmethod
    async def update(self, *, event: EventEntity) -> EventEntity:
        pass

    @abstractmethod
    async def add_ticket_type(self, *, ticket_type: TicketTypeEntity) -> TicketTypeEntity:
        pass

    @abstractmethod
    async def delete(self, *, event_id: int) -> bool:
        """Delete the event, its ticket types go with it"""
