from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.exception.exceptions import NotFoundError
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.interface.i_venue_repo import IVenueRepo
from src.service.registration.domain.entity.venue_entity import VenueEntity


class ManageVenueUseCase:
    def __init__(self, *, venue_repo: IVenueRepo) -> None:
        self.venue_repo = venue_repo

    @classmethod
    @inject
    def depends(cls, venue_repo: IVenueRepo = Depends(Provide[Container.venue_repo])) -> Self:
        return cls(venue_repo=venue_repo)

    @Logger.io
    async def create(
        self,
        *,
        owner_id: UUID,
        name: str,
        capacity: int,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> VenueEntity:
        venue = VenueEntity.create(
            name=name,
            capacity=capacity,
            owner_id=owner_id,
            location=location,
            description=description,
        )
        return await self.venue_repo.create(venue=venue)

    @Logger.io
    async def update(
        self,
        *,
        venue_id: int,
        owner_id: UUID,
        name: Optional[str] = None,
        capacity: Optional[int] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> VenueEntity:
        venue = await self._get_owned(venue_id=venue_id, owner_id=owner_id)
        updated = venue.update(
            name=name, capacity=capacity, location=location, description=description
        )
        return await self.venue_repo.update(venue=updated)

    @Logger.io
    async def delete(self, *, venue_id: int, owner_id: UUID) -> None:
        """
        Raises:
            ConflictError: Events still take place at this venue
        """
        await self._get_owned(venue_id=venue_id, owner_id=owner_id)
        await self.venue_repo.delete(venue_id=venue_id)
        Logger.base.info(f'🗑️ [VENUE] Deleted venue {venue_id}')

    async def _get_owned(self, *, venue_id: int, owner_id: UUID) -> VenueEntity:
        venue = await self.venue_repo.get_by_id(venue_id=venue_id)
        if venue is None:
            raise NotFoundError(f'Venue {venue_id} not found')
        venue.ensure_owned_by(owner_id)
        return venue
