"""
Capacity Ledger Implementation - the only writer of ticket_type.sold_count

Reserve:  conditional increment + insert of a `held` entry, one transaction
Release:  CAS `held -> released` + decrement guarded by sold_count > 0, one transaction

Reserve first looks up an existing entry to answer replays. That read takes no
lock; the conditional increment is the first write and takes the row lock (or
SQLite RESERVED lock), and a replay racing past the lookup is caught by the
primary key on the entry insert. Release starts with the CAS write, so the
entry and the sold_count row are only read under the lock.
"""

from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

from opentelemetry import trace
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.registration_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.interface.i_capacity_ledger import ICapacityLedger
from src.service.registration.domain.enum.reservation_status import ReservationStatus
from src.service.registration.domain.registration_errors import (
    CapacityExceededError,
    InternalInconsistencyError,
)
from src.service.registration.domain.value_object.reservation import Release, Reservation
from src.service.registration.driven_adapter.model.capacity_reservation_model import (
    CapacityReservationModel,
)
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel


class CapacityLedgerImpl(ICapacityLedger):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def try_reserve(self, *, ticket_type_id: int, reservation_id: UUID) -> Reservation:
        with self.tracer.start_as_current_span(
            'ledger.try_reserve',
            attributes={
                'ticket_type.id': ticket_type_id,
                'reservation.id': str(reservation_id),
            },
        ) as span:
            async with self.session_factory() as session:
                existing = await self._get_entry_status(session, reservation_id)
                if existing is not None:
                    span.set_attribute('ledger.replayed', True)
                    return self._replay(
                        status=existing, ticket_type_id=ticket_type_id, reservation_id=reservation_id
                    )

                result = await session.execute(
                    update(TicketTypeModel)
                    .where(
                        TicketTypeModel.id == ticket_type_id,
                        or_(
                            TicketTypeModel.capacity.is_(None),
                            TicketTypeModel.sold_count < TicketTypeModel.capacity,
                        ),
                    )
                    .values(sold_count=TicketTypeModel.sold_count + 1)
                    .execution_options(synchronize_session=False)
                )

                if result.rowcount == 0:
                    exists = await session.scalar(
                        select(TicketTypeModel.id).where(TicketTypeModel.id == ticket_type_id)
                    )
                    await session.rollback()
                    if exists is None:
                        metrics.record_capacity_operation(operation='reserve', result='not_found')
                        raise NotFoundError(f'Ticket type {ticket_type_id} not found')

                    metrics.record_capacity_operation(operation='reserve', result='exceeded')
                    span.set_attribute('ledger.exceeded', True)
                    raise CapacityExceededError()

                session.add(
                    CapacityReservationModel(
                        id=reservation_id,
                        ticket_type_id=ticket_type_id,
                        status=ReservationStatus.HELD.value,
                        created_at=utc_now(),
                    )
                )

                try:
                    await session.commit()
                except IntegrityError:
                    # Same reservation id committed concurrently, our increment is rolled back
                    await session.rollback()
                    existing = await self._get_entry_status(session, reservation_id)
                    if existing is None:
                        raise
                    return self._replay(
                        status=existing, ticket_type_id=ticket_type_id, reservation_id=reservation_id
                    )

                sold_count = await session.scalar(
                    select(TicketTypeModel.sold_count).where(TicketTypeModel.id == ticket_type_id)
                )

            metrics.record_capacity_operation(operation='reserve', result='reserved')
            Logger.base.info(
                f'🎟️ [LEDGER] Reserved ticket_type={ticket_type_id} '
                f'reservation={reservation_id} sold_count={sold_count}'
            )
            return Reservation(
                reservation_id=reservation_id, ticket_type_id=ticket_type_id, sold_count=sold_count
            )

    @Logger.io
    async def release(self, *, reservation_id: UUID) -> Release:
        with self.tracer.start_as_current_span(
            'ledger.release', attributes={'reservation.id': str(reservation_id)}
        ) as span:
            async with self.session_factory() as session:
                flipped = await session.execute(
                    update(CapacityReservationModel)
                    .where(
                        CapacityReservationModel.id == reservation_id,
                        CapacityReservationModel.status == ReservationStatus.HELD.value,
                    )
                    .values(status=ReservationStatus.RELEASED.value, released_at=utc_now())
                    .execution_options(synchronize_session=False)
                )

                if flipped.rowcount == 0:
                    await session.rollback()
                    metrics.record_capacity_operation(operation='release', result='noop')
                    span.set_attribute('ledger.noop', True)
                    return Release(reservation_id=reservation_id, released=False)

                ticket_type_id = await session.scalar(
                    select(CapacityReservationModel.ticket_type_id).where(
                        CapacityReservationModel.id == reservation_id
                    )
                )
                decremented = await session.execute(
                    update(TicketTypeModel)
                    .where(TicketTypeModel.id == ticket_type_id, TicketTypeModel.sold_count > 0)
                    .values(sold_count=TicketTypeModel.sold_count - 1)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()

            if decremented.rowcount == 0:
                self._report_inconsistency(
                    reservation_id=reservation_id, ticket_type_id=ticket_type_id
                )
                return Release(reservation_id=reservation_id, released=True, clamped=True)

            metrics.record_capacity_operation(operation='release', result='released')
            Logger.base.info(
                f'↩️ [LEDGER] Released ticket_type={ticket_type_id} reservation={reservation_id}'
            )
            return Release(reservation_id=reservation_id, released=True)

    @staticmethod
    async def _get_entry_status(
        session: AsyncSession, reservation_id: UUID
    ) -> Optional[ReservationStatus]:
        status = await session.scalar(
            select(CapacityReservationModel.status).where(
                CapacityReservationModel.id == reservation_id
            )
        )
        return ReservationStatus(status) if status is not None else None

    @staticmethod
    def _replay(
        *, status: ReservationStatus, ticket_type_id: int, reservation_id: UUID
    ) -> Reservation:
        if status == ReservationStatus.RELEASED:
            raise ConflictError(f'Reservation {reservation_id} was already released')

        metrics.record_capacity_operation(operation='reserve', result='replayed')
        return Reservation(
            reservation_id=reservation_id, ticket_type_id=ticket_type_id, replayed=True
        )

    @staticmethod
    def _report_inconsistency(*, reservation_id: UUID, ticket_type_id: Optional[int]) -> None:
        error = InternalInconsistencyError(
            f'Released reservation {reservation_id} but ticket_type={ticket_type_id} '
            'sold_count was already 0'
        )
        metrics.ledger_inconsistencies.inc()
        metrics.record_capacity_operation(operation='release', result='clamped')
        Logger.base.error(f'🚨 [LEDGER] {error.message}')
