from typing import List, Self
from uuid import UUID

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.store_retry import retry_store_operation
from src.platform.exception.exceptions import CustomBaseError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.registration.app.command.cancel_registration_use_case import (
    CancelRegistrationUseCase,
)
from src.service.registration.app.interface.i_capacity_ledger import ICapacityLedger
from src.service.registration.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.registration.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.registration.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.registration_status import RegistrationStatus


CANCEL_CONCURRENCY = 10


class DeleteEventUseCase:
    """
    Cascade-cancel delete.

    1. Close the event (status -> cancelled) so no new registration gets in
    2. Cancel every active registration through the cancel workflow,
       which releases each confirmed reservation
    3. Delete the event, its ticket types go with it
    4. Cancel anything registered while steps 2-3 ran

    Registrations stay behind as cancelled history.
    """

    def __init__(
        self,
        *,
        event_command_repo: IEventCommandRepo,
        event_query_repo: IEventQueryRepo,
        registration_command_repo: IRegistrationCommandRepo,
        capacity_ledger: ICapacityLedger,
    ) -> None:
        self.event_command_repo = event_command_repo
        self.event_query_repo = event_query_repo
        self.registration_command_repo = registration_command_repo
        self.cancel_registration = CancelRegistrationUseCase(
            registration_command_repo=registration_command_repo,
            event_query_repo=event_query_repo,
            capacity_ledger=capacity_ledger,
        )
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        event_command_repo: IEventCommandRepo = Depends(Provide[Container.event_command_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        registration_command_repo: IRegistrationCommandRepo = Depends(
            Provide[Container.registration_command_repo]
        ),
        capacity_ledger: ICapacityLedger = Depends(Provide[Container.capacity_ledger]),
    ) -> Self:
        return cls(
            event_command_repo=event_command_repo,
            event_query_repo=event_query_repo,
            registration_command_repo=registration_command_repo,
            capacity_ledger=capacity_ledger,
        )

    @Logger.io
    async def delete_event(self, *, event_id: int, organizer_id: UUID) -> int:
        """Returns the number of registrations cancelled"""
        with self.tracer.start_as_current_span(
            'use_case.delete_event', attributes={'event.id': event_id}
        ) as span:
            event = await self.event_query_repo.get_by_id(event_id=event_id)
            if event is None:
                raise NotFoundError(f'Event {event_id} not found')
            event.ensure_owned_by(organizer_id)

            if event.status != EventStatus.CANCELLED:
                await self.event_command_repo.update(
                    event=event.update(status=EventStatus.CANCELLED)
                )

            active = await self.registration_command_repo.list_active_by_event(event_id=event_id)
            failures: List[CustomBaseError] = []
            limiter = anyio.CapacityLimiter(CANCEL_CONCURRENCY)

            async def cancel_one(registration_id: UUID) -> None:
                async with limiter:
                    try:
                        await self.cancel_registration.cancel(
                            registration_id=registration_id, actor_id=organizer_id, promote=False
                        )
                    except CustomBaseError as e:
                        failures.append(e)

            async with anyio.create_task_group() as tg:
                for registration in active:
                    tg.start_soon(cancel_one, registration.id)

            if failures:
                # Event stays (closed) so the delete can be retried
                raise failures[0]

            await self.event_command_repo.delete(event_id=event_id)
            cancelled = len(active) + await self._cancel_late_registrations(event_id=event_id)
            span.set_attribute('registrations.cancelled', cancelled)
            Logger.base.info(
                f'🗑️ [EVENT] Deleted event {event_id}, cancelled {cancelled} registrations'
            )
            return cancelled

    async def _cancel_late_registrations(self, *, event_id: int) -> int:
        """
        Cancel registrations stored while the delete was running.

        Their ledger entries went with the ticket types, so only the status moves.
        """
        late = await retry_store_operation(
            lambda: self.registration_command_repo.list_active_by_event(event_id=event_id),
            name='registration.list_active_by_event',
        )
        cancelled = 0
        for registration in late:
            moved = await retry_store_operation(
                lambda: self.registration_command_repo.compare_and_set_status(
                    registration_id=registration.id,
                    expected=registration.status,
                    new_status=RegistrationStatus.CANCELLED,
                ),
                name='registration.cancel',
            )
            if moved:
                cancelled += 1
                Logger.base.warning(
                    f'⚠️ [EVENT] Cancelled registration {registration.id} stored during delete '
                    f'of event {event_id}'
                )
        return cancelled
