from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.store_retry import retry_store_operation
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    ForbiddenError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.registration_metrics import metrics
from src.service.registration.app.command.promote_waitlist_use_case import (
    PromoteWaitlistUseCase,
)
from src.service.registration.app.interface.i_capacity_ledger import ICapacityLedger
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.enum.registration_status import RegistrationStatus


MAX_STATUS_CAS_ATTEMPTS = 3


class CancelRegistrationUseCase:
    """
    Cancel a registration and hand its capacity back.

    confirmed -> cancelled releases the reservation once, then promotes the
    waitlist. waitlist -> cancelled releases nothing. Cancelling an already
    cancelled registration returns it unchanged.
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
        self.promote_waitlist = PromoteWaitlistUseCase(
            registration_command_repo=registration_command_repo,
            capacity_ledger=capacity_ledger,
        )
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
    async def cancel(
        self, *, registration_id: UUID, actor_id: UUID, promote: bool = True
    ) -> RegistrationEntity:
        """
        Args:
            actor_id: The participant, or the organizer of the registration's event
            promote: Promote the waitlist after a confirmed cancellation

        Raises:
            NotFoundError: Registration does not exist
            ForbiddenError: Actor is neither the participant nor the organizer
        """
        with self.tracer.start_as_current_span(
            'use_case.cancel_registration',
            attributes={'registration.id': str(registration_id)},
        ) as span:
            registration = await self._get(registration_id)
            await self._ensure_can_cancel(registration=registration, actor_id=actor_id)

            tried_from_confirmed = False
            for _ in range(MAX_STATUS_CAS_ATTEMPTS):
                previous = registration.status
                if previous == RegistrationStatus.CANCELLED:
                    if tried_from_confirmed:
                        # Our CAS may have landed before a transient failure hid the result
                        await self._release_and_promote(registration=registration, promote=promote)
                    metrics.record_cancellation(result='already_cancelled')
                    span.set_attribute('registration.already_cancelled', True)
                    return registration

                tried_from_confirmed = tried_from_confirmed or (
                    previous == RegistrationStatus.CONFIRMED
                )
                moved = await retry_store_operation(
                    lambda: self.registration_command_repo.compare_and_set_status(
                        registration_id=registration_id,
                        expected=previous,
                        new_status=RegistrationStatus.CANCELLED,
                    ),
                    name='registration.cancel',
                )
                if moved:
                    break

                # Promoted or cancelled concurrently, decide again on the fresh status
                registration = await self._get(registration_id)
            else:
                raise ConflictError('Registration changed concurrently, please retry')

            if previous == RegistrationStatus.CONFIRMED:
                await self._release_and_promote(registration=registration, promote=promote)

            metrics.record_cancellation(result='cancelled')
            Logger.base.info(
                f'🚫 [CANCEL] Registration {registration_id} {previous.value} -> cancelled'
            )
            return registration.cancel()

    async def _get(self, registration_id: UUID) -> RegistrationEntity:
        registration = await retry_store_operation(
            lambda: self.registration_command_repo.get_by_id(registration_id=registration_id),
            name='registration.get_by_id',
        )
        if registration is None:
            raise NotFoundError(f'Registration {registration_id} not found')
        return registration

    async def _ensure_can_cancel(self, *, registration: RegistrationEntity, actor_id: UUID) -> None:
        if registration.user_id == actor_id:
            return

        event = await retry_store_operation(
            lambda: self.event_query_repo.get_by_id(event_id=registration.event_id),
            name='event.get_by_id',
        )
        if event is None or event.organizer_id != actor_id:
            raise ForbiddenError('You can only cancel your own registrations')

    async def _release_and_promote(self, *, registration: RegistrationEntity, promote: bool) -> None:
        await retry_store_operation(
            lambda: self.capacity_ledger.release(reservation_id=registration.id),
            name='ledger.release',
        )
        if not (promote and settings.WAITLIST_AUTO_PROMOTE):
            return

        try:
            await self.promote_waitlist.promote(ticket_type_id=registration.ticket_type_id)
        except CustomBaseError as e:
            # Cancellation is committed, the waitlist is picked up by the next cancel
            metrics.waitlist_promotion_failures.inc()
            Logger.base.error(
                f'❌ [CANCEL] Waitlist promotion for ticket_type={registration.ticket_type_id} '
                f'failed after cancelling {registration.id}: {e.message}'
            )
