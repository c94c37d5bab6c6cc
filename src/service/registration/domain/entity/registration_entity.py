from datetime import datetime
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.domain.enum.registration_status import (
    ACTIVE_REGISTRATION_STATUSES,
    RegistrationStatus,
)


@attrs.define
class RegistrationEntity:
    """
    Join record between a user, an event and one of its ticket types.

    The id doubles as the capacity reservation id, so a confirmed
    registration always maps to exactly one ledger entry.
    """

    id: UUID
    user_id: UUID
    event_id: int
    ticket_type_id: int
    status: RegistrationStatus = RegistrationStatus.CONFIRMED
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def new_id() -> UUID:
        return uuid7()

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: UUID,
        user_id: UUID,
        event_id: int,
        ticket_type_id: int,
        status: RegistrationStatus,
        idempotency_key: Optional[str] = None,
    ) -> 'RegistrationEntity':
        if status not in ACTIVE_REGISTRATION_STATUSES:
            raise DomainError(f'A new registration cannot start as {status.value}')

        now = utc_now()
        return cls(
            id=id,
            user_id=user_id,
            event_id=event_id,
            ticket_type_id=ticket_type_id,
            status=status,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_REGISTRATION_STATUSES

    @property
    def is_confirmed(self) -> bool:
        return self.status == RegistrationStatus.CONFIRMED

    @property
    def is_waitlisted(self) -> bool:
        return self.status == RegistrationStatus.WAITLIST

    def cancel(self) -> 'RegistrationEntity':
        return attrs.evolve(self, status=RegistrationStatus.CANCELLED, updated_at=utc_now())

    def confirm(self) -> 'RegistrationEntity':
        if self.status != RegistrationStatus.WAITLIST:
            raise DomainError('Only waitlisted registrations can be promoted')
        return attrs.evolve(self, status=RegistrationStatus.CONFIRMED, updated_at=utc_now())
