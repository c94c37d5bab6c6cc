from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.interface.i_venue_repo import IVenueRepo
from src.service.registration.domain.entity.venue_entity import VenueEntity
from src.service.registration.driven_adapter.model.event_model import EventModel
from src.service.registration.driven_adapter.model.venue_model import VenueModel
from src.service.registration.driven_adapter.repo.entity_mapper import venue_model_to_entity


class VenueRepoImpl(IVenueRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, venue: VenueEntity) -> VenueEntity:
        now = utc_now()
        model = VenueModel(
            name=venue.name,
            location=venue.location,
            capacity=venue.capacity,
            description=venue.description,
            owner_id=venue.owner_id,
            created_at=venue.created_at or now,
            updated_at=venue.updated_at or now,
        )

        async with self.session_factory() as session:
            session.add(model)
            await session.commit()

        return venue_model_to_entity(model)

    @Logger.io
    async def get_by_id(self, *, venue_id: int) -> Optional[VenueEntity]:
        async with self.session_factory() as session:
            model = await session.get(VenueModel, venue_id)
            return venue_model_to_entity(model) if model else None

    @Logger.io
    async def list_by_owner(self, *, owner_id: UUID) -> List[VenueEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(VenueModel).where(VenueModel.owner_id == owner_id).order_by(VenueModel.name)
            )
            return [venue_model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def update(self, *, venue: VenueEntity) -> VenueEntity:
        async with self.session_factory() as session:
            model = await session.get(VenueModel, venue.id)
            if model is None:
                raise NotFoundError(f'Venue {venue.id} not found')

            model.name = venue.name
            model.location = venue.location
            model.capacity = venue.capacity
            model.description = venue.description
            model.updated_at = venue.updated_at or utc_now()
            await session.commit()

            return venue_model_to_entity(model)

    @Logger.io
    async def delete(self, *, venue_id: int) -> bool:
        async with self.session_factory() as session:
            referencing_events = await session.scalar(
                select(func.count(EventModel.id)).where(EventModel.venue_id == venue_id)
            )
            if referencing_events:
                raise ConflictError(
                    f'Venue {venue_id} is used by {referencing_events} event(s) and cannot be deleted'
                )

            result = await session.execute(
                delete(VenueModel)
                .where(VenueModel.id == venue_id)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0
