"""
Shared fixtures for registration use case unit tests

All collaborators are AsyncMocks; entities are real so domain rules still apply.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from uuid_utils.compat import uuid7

from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.domain.enum.registration_status import RegistrationStatus
from src.service.registration.domain.value_object.reservation import Release, Reservation


EVENT_ID = 1
LIMITED_TICKET_ID = 10
WAITLIST_TICKET_ID = 11


@pytest.fixture
def organizer_id() -> UUID:
    return uuid7()


@pytest.fixture
def user_id() -> UUID:
    return uuid7()


@pytest.fixture
def open_event(organizer_id: UUID) -> EventEntity:
    start = datetime.now(timezone.utc) + timedelta(days=7)
    event = EventEntity.create(
        title='Async Python Workshop',
        organizer_id=organizer_id,
        start_ts=start,
        end_ts=start + timedelta(hours=2),
        venue_name='Room 101',
    )
    event.id = EVENT_ID
    event.ticket_types = [
        TicketTypeEntity(
            id=LIMITED_TICKET_ID, event_id=EVENT_ID, name='Standard', capacity=2, sold_count=0
        ),
        TicketTypeEntity(
            id=WAITLIST_TICKET_ID,
            event_id=EVENT_ID,
            name='Early Bird',
            capacity=1,
            sold_count=1,
            waitlist_enabled=True,
        ),
    ]
    return event


@pytest.fixture
def make_registration(user_id: UUID) -> Callable[..., RegistrationEntity]:
    def _make_registration(
        status: RegistrationStatus = RegistrationStatus.CONFIRMED,
        *,
        ticket_type_id: int = LIMITED_TICKET_ID,
        owner_id: UUID | None = None,
        idempotency_key: str | None = None,
    ) -> RegistrationEntity:
        registration = RegistrationEntity.create(
            id=RegistrationEntity.new_id(),
            user_id=owner_id or user_id,
            event_id=EVENT_ID,
            ticket_type_id=ticket_type_id,
            status=RegistrationStatus.CONFIRMED,
            idempotency_key=idempotency_key,
        )
        registration.status = status
        return registration

    return _make_registration


@pytest.fixture
def mock_registration_command_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_active = AsyncMock(return_value=None)
    repo.get_by_idempotency_key = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda *, registration: registration)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.compare_and_set_status = AsyncMock(return_value=True)
    repo.list_waitlisted = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_event_query_repo(open_event: EventEntity) -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=open_event)
    return repo


@pytest.fixture
def mock_capacity_ledger() -> AsyncMock:
    ledger = AsyncMock()
    ledger.try_reserve = AsyncMock(
        side_effect=lambda *, ticket_type_id, reservation_id: Reservation(
            reservation_id=reservation_id, ticket_type_id=ticket_type_id, sold_count=1
        )
    )
    ledger.release = AsyncMock(
        side_effect=lambda *, reservation_id: Release(reservation_id=reservation_id, released=True)
    )
    return ledger
