from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.interface.i_venue_repo import IVenueRepo
from src.service.registration.domain.entity.venue_entity import VenueEntity


class ListVenuesUseCase:
    def __init__(self, *, venue_repo: IVenueRepo) -> None:
        self.venue_repo = venue_repo

    @classmethod
    @inject
    def depends(cls, venue_repo: IVenueRepo = Depends(Provide[Container.venue_repo])) -> Self:
        return cls(venue_repo=venue_repo)

    @Logger.io
    async def list_by_owner(self, *, owner_id: UUID) -> List[VenueEntity]:
        return await self.venue_repo.list_by_owner(owner_id=owner_id)

    @Logger.io
    async def get_by_id(self, *, venue_id: int) -> VenueEntity:
        venue = await self.venue_repo.get_by_id(venue_id=venue_id)
        if venue is None:
            raise NotFoundError(f'Venue {venue_id} not found')
        return venue
