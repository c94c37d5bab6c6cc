import time
from typing import Optional, Self, Tuple
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.store_retry import retry_store_operation
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.registration_metrics import metrics
from src.service.registration.app.interface.i_capacity_ledger import ICapacityLedger
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.enum.registration_status import RegistrationStatus
from src.service.registration.domain.registration_errors import (
    CapacityExceededError,
    DuplicateRegistrationError,
    EventNotOpenError,
)


class RegisterUseCase:
    """
    Register a participant for one ticket type of an event.

    Flow:
    1. Idempotency key replay (same user, same key -> stored registration)
    2. Duplicate check on the active registration
    3. Event / ticket type existence and open-for-registration check
    4. Capacity ledger try_reserve keyed by the new registration id
       (sold out -> waitlist registration when the ticket type allows it)
    5. Persist the registration; when the insert fails and no row was stored,
       release the reservation

    The partial unique index is the real duplicate guard; step 2 only fails
    fast before any capacity is claimed.
    """

    def __init__(
        self,
        *,
        registration_command_repo: IRegistrationCommandRepo,
        event_query_repo: IEventQueryRepo,
        capacity_ledger: ICapacityLedger,
    ) -> None:
        self.registration_command_repo = registration_command_repo
        self.event_query_repo = event_query_repo
        self.capacity_ledger = capacity_ledger
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        registration_command_repo: IRegistrationCommandRepo = Depends(
            Provide[Container.registration_command_repo]
        ),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        capacity_ledger: ICapacityLedger = Depends(Provide[Container.capacity_ledger]),
    ) -> Self:
        return cls(
            registration_command_repo=registration_command_repo,
            event_query_repo=event_query_repo,
            capacity_ledger=capacity_ledger,
        )

    @Logger.io
    async def register(
        self,
        *,
        user_id: UUID,
        event_id: int,
        ticket_type_id: int,
        idempotency_key: Optional[str] = None,
    ) -> RegistrationEntity:
        """
        Returns:
            The confirmed or waitlisted registration, or the stored one on replay

        Raises:
            DuplicateRegistrationError: Active registration already exists
            NotFoundError: Event or ticket type missing, or not related
            EventNotOpenError: Event is not active or has started
            CapacityExceededError: Sold out and the ticket type has no waitlist
            StoreUnavailableError: Store kept failing after bounded retries
        """
        started = time.perf_counter()
        outcome = 'error'
        metrics.in_flight_registrations.inc()

        try:
            with self.tracer.start_as_current_span(
                'use_case.register',
                attributes={
                    'user.id': str(user_id),
                    'event.id': event_id,
                    'ticket_type.id': ticket_type_id,
                },
            ) as span:
                registration, outcome = await self._register(
                    user_id=user_id,
                    event_id=event_id,
                    ticket_type_id=ticket_type_id,
                    idempotency_key=idempotency_key,
                )
                span.set_attribute('registration.outcome', outcome)
                return registration
        except CustomBaseError as e:
            outcome = self._outcome_of(e)
            raise
        finally:
            metrics.in_flight_registrations.dec()
            metrics.record_registration(result=outcome, duration=time.perf_counter() - started)

    async def _register(
        self,
        *,
        user_id: UUID,
        event_id: int,
        ticket_type_id: int,
        idempotency_key: Optional[str],
    ) -> Tuple[RegistrationEntity, str]:
        if idempotency_key:
            replayed = await self._find_replay(
                user_id=user_id,
                event_id=event_id,
                ticket_type_id=ticket_type_id,
                idempotency_key=idempotency_key,
            )
            if replayed is not None:
                return replayed, 'replayed'

        active = await retry_store_operation(
            lambda: self.registration_command_repo.find_active(
                user_id=user_id, event_id=event_id, ticket_type_id=ticket_type_id
            ),
            name='registration.find_active',
        )
        if active is not None:
            raise DuplicateRegistrationError()

        event = await retry_store_operation(
            lambda: self.event_query_repo.get_by_id(event_id=event_id),
            name='event.get_by_id',
        )
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')

        ticket_type = event.find_ticket_type(ticket_type_id)
        if ticket_type is None:
            raise NotFoundError(f'Ticket type {ticket_type_id} not found for event {event_id}')

        event.ensure_open_for_registration()

        registration_id = RegistrationEntity.new_id()
        status = RegistrationStatus.CONFIRMED
        try:
            await retry_store_operation(
                lambda: self.capacity_ledger.try_reserve(
                    ticket_type_id=ticket_type_id, reservation_id=registration_id
                ),
                name='ledger.try_reserve',
            )
        except CapacityExceededError:
            if not ticket_type.waitlist_enabled:
                raise
            status = RegistrationStatus.WAITLIST
            Logger.base.info(
                f'⏸️ [REGISTER] ticket_type={ticket_type_id} sold out, waitlisting user {user_id}'
            )

        registration = RegistrationEntity.create(
            id=registration_id,
            user_id=user_id,
            event_id=event_id,
            ticket_type_id=ticket_type_id,
            status=status,
            idempotency_key=idempotency_key,
        )

        try:
            saved = await self.registration_command_repo.create(registration=registration)
        except DuplicateRegistrationError:
            await self._compensate(registration=registration)
            if idempotency_key:
                # A concurrent request with the same key won the insert
                replayed = await self._find_replay(
                    user_id=user_id,
                    event_id=event_id,
                    ticket_type_id=ticket_type_id,
                    idempotency_key=idempotency_key,
                )
                if replayed is not None:
                    return replayed, 'replayed'
            raise
        except Exception as e:
            stored = await self._find_stored(registration=registration, error=e)
            if stored is not None:
                Logger.base.warning(
                    f'⚠️ [REGISTER] Registration {stored.id} was stored despite '
                    f'{type(e).__name__}, keeping its reservation'
                )
                return stored, stored.status.value
            await self._compensate(registration=registration)
            raise

        Logger.base.info(
            f'✅ [REGISTER] {saved.status.value} registration {saved.id} '
            f'user={user_id} event={event_id} ticket_type={ticket_type_id}'
        )
        return saved, saved.status.value

    async def _find_replay(
        self,
        *,
        user_id: UUID,
        event_id: int,
        ticket_type_id: int,
        idempotency_key: str,
    ) -> Optional[RegistrationEntity]:
        existing = await retry_store_operation(
            lambda: self.registration_command_repo.get_by_idempotency_key(
                user_id=user_id, idempotency_key=idempotency_key
            ),
            name='registration.get_by_idempotency_key',
        )
        if existing is None:
            return None

        if existing.event_id != event_id or existing.ticket_type_id != ticket_type_id:
            raise ConflictError('Idempotency key was already used for a different registration')

        Logger.base.info(f'🔁 [REGISTER] Replayed registration {existing.id} for key {idempotency_key}')
        return existing

    async def _find_stored(
        self, *, registration: RegistrationEntity, error: Exception
    ) -> Optional[RegistrationEntity]:
        """
        Look the registration up after a failed insert, the commit may have landed.

        Raises:
            The insert error when the lookup itself fails, leaving the reservation held
        """
        try:
            return await retry_store_operation(
                lambda: self.registration_command_repo.get_by_id(registration_id=registration.id),
                name='registration.get_by_id',
            )
        except CustomBaseError as lookup_error:
            Logger.base.error(
                f'❌ [REGISTER] Cannot tell whether {registration.id} was stored '
                f'({lookup_error.message}), reservation kept'
            )
            raise error from lookup_error

    async def _compensate(self, *, registration: RegistrationEntity) -> None:
        """Release the reservation claimed for a registration that was never stored"""
        if registration.status != RegistrationStatus.CONFIRMED:
            return

        metrics.compensating_releases.inc()
        Logger.base.warning(f'↩️ [REGISTER] Compensating release for {registration.id}')
        try:
            await retry_store_operation(
                lambda: self.capacity_ledger.release(reservation_id=registration.id),
                name='ledger.release',
            )
        except CustomBaseError as e:
            # The triggering failure is re-raised by the caller
            Logger.base.error(
                f'❌ [REGISTER] Compensating release failed for {registration.id}: {e.message}'
            )

    @staticmethod
    def _outcome_of(error: CustomBaseError) -> str:
        if isinstance(error, DuplicateRegistrationError):
            return 'duplicate'
        if isinstance(error, CapacityExceededError):
            return 'capacity_exceeded'
        if isinstance(error, EventNotOpenError):
            return 'not_open'
        if isinstance(error, NotFoundError):
            return 'not_found'
        return 'error'
