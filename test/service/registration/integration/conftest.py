"""
Shared fixtures for registration integration tests

Real repositories and ledger over the SQLite test store. Every test class
also requests `clean_database` for a fresh schema.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import pytest

from src.platform.database.orm_db_setting import Database
from src.service.registration.app.command.cancel_registration_use_case import (
    CancelRegistrationUseCase,
)
from src.service.registration.app.command.create_event_use_case import CreateEventUseCase
from src.service.registration.app.command.delete_event_use_case import DeleteEventUseCase
from src.service.registration.app.command.register_use_case import RegisterUseCase
from src.service.registration.app.dto.ticket_type_definition_dto import TicketTypeDefinition
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.driven_adapter.ledger.capacity_ledger_impl import (
    CapacityLedgerImpl,
)
from src.service.registration.driven_adapter.repo.event_command_repo_impl import (
    EventCommandRepoImpl,
)
from src.service.registration.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.registration.driven_adapter.repo.profile_repo_impl import ProfileRepoImpl
from src.service.registration.driven_adapter.repo.registration_command_repo_impl import (
    RegistrationCommandRepoImpl,
)
from src.service.registration.driven_adapter.repo.registration_query_repo_impl import (
    RegistrationQueryRepoImpl,
)
from src.service.registration.driven_adapter.repo.venue_repo_impl import VenueRepoImpl


# =============================================================================
# Driven adapters
# =============================================================================
@pytest.fixture
def capacity_ledger(database: Database) -> CapacityLedgerImpl:
    return CapacityLedgerImpl(session_factory=database.session)


@pytest.fixture
def registration_command_repo(database: Database) -> RegistrationCommandRepoImpl:
    return RegistrationCommandRepoImpl(session_factory=database.session)


@pytest.fixture
def event_command_repo(database: Database) -> EventCommandRepoImpl:
    return EventCommandRepoImpl(session_factory=database.session)


@pytest.fixture
def event_query_repo(database: Database) -> EventQueryRepoImpl:
    return EventQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def venue_repo(database: Database) -> VenueRepoImpl:
    return VenueRepoImpl(session_factory=database.session)


@pytest.fixture
def profile_repo(database: Database) -> ProfileRepoImpl:
    return ProfileRepoImpl(session_factory=database.session)


@pytest.fixture
def registration_query_repo(read_database: Database) -> RegistrationQueryRepoImpl:
    return RegistrationQueryRepoImpl(session_factory=read_database.session)


# =============================================================================
# Use cases wired to the real adapters
# =============================================================================
@pytest.fixture
def register_use_case(
    registration_command_repo: RegistrationCommandRepoImpl,
    event_query_repo: EventQueryRepoImpl,
    capacity_ledger: CapacityLedgerImpl,
) -> RegisterUseCase:
    return RegisterUseCase(
        registration_command_repo=registration_command_repo,
        event_query_repo=event_query_repo,
        capacity_ledger=capacity_ledger,
    )


@pytest.fixture
def cancel_use_case(
    registration_command_repo: RegistrationCommandRepoImpl,
    event_query_repo: EventQueryRepoImpl,
    capacity_ledger: CapacityLedgerImpl,
) -> CancelRegistrationUseCase:
    return CancelRegistrationUseCase(
        registration_command_repo=registration_command_repo,
        event_query_repo=event_query_repo,
        capacity_ledger=capacity_ledger,
    )


@pytest.fixture
def create_event_use_case(
    event_command_repo: EventCommandRepoImpl, venue_repo: VenueRepoImpl
) -> CreateEventUseCase:
    return CreateEventUseCase(event_command_repo=event_command_repo, venue_repo=venue_repo)


@pytest.fixture
def delete_event_use_case(
    event_command_repo: EventCommandRepoImpl,
    event_query_repo: EventQueryRepoImpl,
    registration_command_repo: RegistrationCommandRepoImpl,
    capacity_ledger: CapacityLedgerImpl,
) -> DeleteEventUseCase:
    return DeleteEventUseCase(
        event_command_repo=event_command_repo,
        event_query_repo=event_query_repo,
        registration_command_repo=registration_command_repo,
        capacity_ledger=capacity_ledger,
    )


# =============================================================================
# Seed helpers
# =============================================================================
@pytest.fixture
def seed_event(
    create_event_use_case: CreateEventUseCase, next_week: datetime
) -> Callable[..., Awaitable[EventEntity]]:
    async def _seed_event(
        organizer_id: UUID,
        *,
        title: str = 'Community Meetup',
        ticket_types: Optional[list[TicketTypeDefinition]] = None,
        start_ts: Optional[datetime] = None,
        venue_id: Optional[int] = None,
        capacity: Optional[int] = None,
        status: EventStatus = EventStatus.ACTIVE,
    ) -> EventEntity:
        start = start_ts or next_week
        return await create_event_use_case.create_event(
            organizer_id=organizer_id,
            title=title,
            start_ts=start,
            end_ts=start + timedelta(hours=3),
            venue_id=venue_id,
            venue_name=None if venue_id else 'Community Hall',
            capacity=capacity,
            status=status,
            ticket_types=ticket_types,
        )

    return _seed_event
