"""
Registration Command Repository Implementation - CQRS Write Side

Status transitions are compare-and-set statements, so concurrent cancels and
promotions never overwrite each other.
"""

from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from opentelemetry import trace
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.enum.registration_status import (
    ACTIVE_REGISTRATION_STATUSES,
    RegistrationStatus,
)
from src.service.registration.domain.registration_errors import DuplicateRegistrationError
from src.service.registration.driven_adapter.model.registration_model import RegistrationModel
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.registration.driven_adapter.repo.entity_mapper import (
    registration_model_to_entity,
)


_ACTIVE_STATUS_VALUES = [s.value for s in ACTIVE_REGISTRATION_STATUSES]


class RegistrationCommandRepoImpl(IRegistrationCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def get_by_id(self, *, registration_id: UUID) -> Optional[RegistrationEntity]:
        async with self.session_factory() as session:
            model = await session.get(RegistrationModel, registration_id)
            return registration_model_to_entity(model) if model else None

    @Logger.io
    async def get_by_idempotency_key(
        self, *, user_id: UUID, idempotency_key: str
    ) -> Optional[RegistrationEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(RegistrationModel).where(
                    RegistrationModel.user_id == user_id,
                    RegistrationModel.idempotency_key == idempotency_key,
                )
            )
            model = result.scalar_one_or_none()
            return registration_model_to_entity(model) if model else None

    @Logger.io
    async def find_active(
        self, *, user_id: UUID, event_id: int, ticket_type_id: int
    ) -> Optional[RegistrationEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(RegistrationModel).where(
                    RegistrationModel.user_id == user_id,
                    RegistrationModel.event_id == event_id,
                    RegistrationModel.ticket_type_id == ticket_type_id,
                    RegistrationModel.status.in_(_ACTIVE_STATUS_VALUES),
                )
            )
            model = result.scalars().first()
            return registration_model_to_entity(model) if model else None

    @Logger.io
    async def create(self, *, registration: RegistrationEntity) -> RegistrationEntity:
        with self.tracer.start_as_current_span(
            'db.registration.create', attributes={'registration.id': str(registration.id)}
        ):
            now = utc_now()
            model = RegistrationModel(
                id=registration.id,
                user_id=registration.user_id,
                event_id=registration.event_id,
                ticket_type_id=registration.ticket_type_id,
                status=registration.status.value,
                idempotency_key=registration.idempotency_key,
                created_at=registration.created_at or now,
                updated_at=registration.updated_at or now,
            )

            async with self.session_factory() as session:
                session.add(model)
                try:
                    await session.flush()
                    # Ticket type checked after the insert, in the same transaction
                    ticket_type = await session.execute(
                        select(TicketTypeModel.id)
                        .where(TicketTypeModel.id == registration.ticket_type_id)
                        .with_for_update(read=True)
                    )
                    if ticket_type.scalar_one_or_none() is None:
                        await session.rollback()
                        raise NotFoundError(
                            f'Ticket type {registration.ticket_type_id} no longer exists'
                        )
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    Logger.base.warning(
                        f'⚠️ [REGISTRATION] Unique index rejected registration {registration.id}'
                    )
                    raise DuplicateRegistrationError() from e

            return registration_model_to_entity(model)

    @Logger.io
    async def compare_and_set_status(
        self,
        *,
        registration_id: UUID,
        expected: RegistrationStatus,
        new_status: RegistrationStatus,
    ) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(RegistrationModel)
                .where(
                    RegistrationModel.id == registration_id,
                    RegistrationModel.status == expected.value,
                )
                .values(status=new_status.value, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount == 1

    @Logger.io
    async def list_waitlisted(self, *, ticket_type_id: int, limit: int) -> List[RegistrationEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(RegistrationModel)
                .where(
                    RegistrationModel.ticket_type_id == ticket_type_id,
                    RegistrationModel.status == RegistrationStatus.WAITLIST.value,
                )
                .order_by(RegistrationModel.created_at.asc(), RegistrationModel.id.asc())
                .limit(limit)
            )
            return [registration_model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_active_by_event(self, *, event_id: int) -> List[RegistrationEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(RegistrationModel)
                .where(
                    RegistrationModel.event_id == event_id,
                    RegistrationModel.status.in_(_ACTIVE_STATUS_VALUES),
                )
                .order_by(RegistrationModel.created_at.asc(), RegistrationModel.id.asc())
            )
            return [registration_model_to_entity(m) for m in result.scalars().all()]
