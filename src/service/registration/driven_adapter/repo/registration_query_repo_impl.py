"""
Registration Query Repository Implementation - CQRS Read Side (Query Facade)

Display-only projections. Wired to the read-only session factory, so reads
may lag the primary when a replica is configured. Write workflows never
decide anything from these results.
"""

from datetime import datetime
from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import to_utc, to_utc_or_none
from src.service.registration.app.dto.registration_view_dto import (
    EventAvailability,
    OrganizerStats,
    RegistrationDetail,
)
from src.service.registration.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.registration_status import (
    ACTIVE_REGISTRATION_STATUSES,
    RegistrationStatus,
)
from src.service.registration.domain.enum.ticket_kind import TicketKind
from src.service.registration.driven_adapter.model.event_model import EventModel
from src.service.registration.driven_adapter.model.profile_model import ProfileModel
from src.service.registration.driven_adapter.model.registration_model import RegistrationModel
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.registration.driven_adapter.model.venue_model import VenueModel
from src.service.registration.driven_adapter.repo.entity_mapper import (
    event_model_to_availability,
)


class RegistrationQueryRepoImpl(IRegistrationQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    # ========== Events with availability ==========

    @Logger.io
    async def list_open_events(self, *, now: datetime) -> List[EventAvailability]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(EventModel)
                .where(EventModel.status == EventStatus.ACTIVE.value, EventModel.start_ts > now)
                .order_by(EventModel.start_ts.asc(), EventModel.id.asc())
            )
            return [event_model_to_availability(m) for m in result.scalars().all()]

    @Logger.io
    async def list_events_by_organizer(self, *, organizer_id: UUID) -> List[EventAvailability]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(EventModel)
                .where(EventModel.organizer_id == organizer_id)
                .order_by(EventModel.start_ts.desc(), EventModel.id.desc())
            )
            return [event_model_to_availability(m) for m in result.scalars().all()]

    @Logger.io
    async def get_event_availability(self, *, event_id: int) -> Optional[EventAvailability]:
        async with self.session_factory() as session:
            result = await session.execute(select(EventModel).where(EventModel.id == event_id))
            model = result.scalar_one_or_none()
            return event_model_to_availability(model) if model else None

    # ========== Registration rolls ==========

    @Logger.io
    async def list_user_registrations(self, *, user_id: UUID) -> List[RegistrationDetail]:
        stmt = self._registration_detail_query().where(RegistrationModel.user_id == user_id)
        return await self._fetch_details(stmt)

    @Logger.io
    async def list_event_registrations(self, *, event_id: int) -> List[RegistrationDetail]:
        stmt = self._registration_detail_query().where(RegistrationModel.event_id == event_id)
        return await self._fetch_details(stmt)

    @Logger.io
    async def list_organizer_registrations(
        self, *, organizer_id: UUID
    ) -> List[RegistrationDetail]:
        stmt = self._registration_detail_query().where(EventModel.organizer_id == organizer_id)
        return await self._fetch_details(stmt)

    # ========== Dashboard ==========

    @Logger.io
    async def get_organizer_stats(self, *, organizer_id: UUID, now: datetime) -> OrganizerStats:
        async with self.session_factory() as session:
            total_events = await session.scalar(
                select(func.count(EventModel.id)).where(EventModel.organizer_id == organizer_id)
            )
            upcoming_events = await session.scalar(
                select(func.count(EventModel.id)).where(
                    EventModel.organizer_id == organizer_id, EventModel.start_ts >= now
                )
            )
            total_venues = await session.scalar(
                select(func.count(VenueModel.id)).where(VenueModel.owner_id == organizer_id)
            )
            total_registrations = await session.scalar(
                select(func.count(RegistrationModel.id))
                .join(EventModel, EventModel.id == RegistrationModel.event_id)
                .where(
                    EventModel.organizer_id == organizer_id,
                    RegistrationModel.status.in_([s.value for s in ACTIVE_REGISTRATION_STATUSES]),
                )
            )

        return OrganizerStats(
            total_events=total_events or 0,
            total_venues=total_venues or 0,
            total_registrations=total_registrations or 0,
            upcoming_events=upcoming_events or 0,
        )

    # ========== Helpers ==========

    @staticmethod
    def _registration_detail_query() -> Select:
        return (
            select(
                RegistrationModel,
                EventModel.title,
                EventModel.start_ts,
                EventModel.venue_name,
                TicketTypeModel.name,
                TicketTypeModel.kind,
                ProfileModel.display_name,
                ProfileModel.email,
            )
            .outerjoin(EventModel, EventModel.id == RegistrationModel.event_id)
            .outerjoin(TicketTypeModel, TicketTypeModel.id == RegistrationModel.ticket_type_id)
            .outerjoin(ProfileModel, ProfileModel.id == RegistrationModel.user_id)
            .order_by(RegistrationModel.created_at.desc(), RegistrationModel.id.desc())
        )

    async def _fetch_details(self, stmt: Select) -> List[RegistrationDetail]:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [
                RegistrationDetail(
                    id=registration.id,
                    user_id=registration.user_id,
                    event_id=registration.event_id,
                    ticket_type_id=registration.ticket_type_id,
                    status=RegistrationStatus(registration.status),
                    created_at=to_utc(registration.created_at),
                    event_title=event_title,
                    event_start_ts=to_utc_or_none(event_start_ts),
                    venue_name=venue_name,
                    ticket_type_name=ticket_type_name,
                    ticket_kind=TicketKind(ticket_kind) if ticket_kind else None,
                    participant_name=participant_name,
                    participant_email=participant_email,
                )
                for (
                    registration,
                    event_title,
                    event_start_ts,
                    venue_name,
                    ticket_type_name,
                    ticket_kind,
                    participant_name,
                    participant_email,
                ) in result.all()
            ]
