from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.store_retry import retry_store_operation
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.registration_metrics import metrics
from src.service.registration.app.interface.i_capacity_ledger import ICapacityLedger
from src.service.registration.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.enum.registration_status import RegistrationStatus
from src.service.registration.domain.registration_errors import CapacityExceededError


PROMOTION_BATCH_SIZE = 50


class PromoteWaitlistUseCase:
    """
    Promote waitlisted registrations of a ticket type, oldest first, while
    the ledger still has capacity.

    Each promotion reserves under the waitlisted registration's own id and then
    moves it waitlist -> confirmed. If the registration was cancelled in
    between, the reservation is handed back.
    """

    def __init__(
        self,
        *,
        registration_command_repo: IRegistrationCommandRepo,
        capacity_ledger: ICapacityLedger,
    ) -> None:
        self.registration_command_repo = registration_command_repo
        self.capacity_ledger = capacity_ledger
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        registration_command_repo: IRegistrationCommandRepo = Depends(
            Provide[Container.registration_command_repo]
        ),
        capacity_ledger: ICapacityLedger = Depends(Provide[Container.capacity_ledger]),
    ) -> Self:
        return cls(
            registration_command_repo=registration_command_repo,
            capacity_ledger=capacity_ledger,
        )

    @Logger.io
    async def promote(self, *, ticket_type_id: int) -> List[RegistrationEntity]:
        with self.tracer.start_as_current_span(
            'use_case.promote_waitlist', attributes={'ticket_type.id': ticket_type_id}
        ) as span:
            candidates = await retry_store_operation(
                lambda: self.registration_command_repo.list_waitlisted(
                    ticket_type_id=ticket_type_id, limit=PROMOTION_BATCH_SIZE
                ),
                name='registration.list_waitlisted',
            )

            promoted: List[RegistrationEntity] = []
            for candidate in candidates:
                try:
                    await retry_store_operation(
                        lambda: self.capacity_ledger.try_reserve(
                            ticket_type_id=ticket_type_id, reservation_id=candidate.id
                        ),
                        name='ledger.try_reserve',
                    )
                except CapacityExceededError:
                    break
                except ConflictError as e:
                    Logger.base.warning(f'⚠️ [WAITLIST] Skipping {candidate.id}: {e.message}')
                    continue

                moved = await retry_store_operation(
                    lambda: self.registration_command_repo.compare_and_set_status(
                        registration_id=candidate.id,
                        expected=RegistrationStatus.WAITLIST,
                        new_status=RegistrationStatus.CONFIRMED,
                    ),
                    name='registration.promote',
                )
                if not moved:
                    # Cancelled while we were reserving
                    await retry_store_operation(
                        lambda: self.capacity_ledger.release(reservation_id=candidate.id),
                        name='ledger.release',
                    )
                    continue

                metrics.waitlist_promotions.inc()
                promoted.append(candidate.confirm())
                Logger.base.info(
                    f'⏫ [WAITLIST] Promoted registration {candidate.id} '
                    f'(ticket_type={ticket_type_id})'
                )

            span.set_attribute('waitlist.promoted', len(promoted))
            return promoted
