from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.registration.app.dto.registration_view_dto import (
    EventAvailability,
    OrganizerStats,
    RegistrationDetail,
)


class IRegistrationQueryRepo(ABC):
    """Display-only projections, may be served from a read replica"""

    @abstractmethod
    async def list_open_events(self, *, now: datetime) -> List[EventAvailability]:
        pass

    @abstractmethod
    async def list_events_by_organizer(self, *, organizer_id: UUID) -> List[EventAvailability]:
        pass

    @abstractmethod
    async def get_event_availability(self, *, event_id: int) -> Optional[EventAvailability]:
        pass

    @abstractmethod
    async def list_user_registrations(self, *, user_id: UUID) -> List[RegistrationDetail]:
        pass

    @abstractmethod
    async def list_event_registrations(self, *, event_id: int) -> List[RegistrationDetail]:
        pass

    @abstractmethod
    async def list_organizer_registrations(
        self, *, organizer_id: UUID
    ) -> List[RegistrationDetail]:
        pass

    @abstractmethod
    async def get_organizer_stats(self, *, organizer_id: UUID, now: datetime) -> OrganizerStats:
        pass
