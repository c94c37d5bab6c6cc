from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.registration.domain.entity.venue_entity import VenueEntity


class IVenueRepo(ABC):
    @abstractmethod
    async def create(self, *, venue: VenueEntity) -> VenueEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, venue_id: int) -> Optional[VenueEntity]:
        pass

    @abstractmethod
    async def list_by_owner(self, *, owner_id: UUID) -> List[VenueEntity]:
        pass

    @abstractmethod
    async def update(self, *, venue: VenueEntity) -> VenueEntity:
        pass

    @abstractmethod
    async def delete(self, *, venue_id: int) -> bool:
        """
        Raises:
            ConflictError: When events still reference the venue
        """
