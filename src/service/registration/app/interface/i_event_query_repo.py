from abc import ABC, abstractmethod
from typing import Optional

from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity


class IEventQueryRepo(ABC):
    """Strongly consistent event reads used by write workflows (primary database)"""

    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        """Event with its ticket types"""

    @abstractmethod
    async def get_ticket_type(self, *, ticket_type_id: int) -> Optional[TicketTypeEntity]:
        pass
