"""
Integration tests for the register / cancel workflow on a real store

Test Focus:
1. Capacity C admits exactly C confirmed registrations, also under concurrency
2. One active registration per (user, event, ticket type), guarded by the store
3. Cancel releases exactly once and promotes the waitlist in FIFO order
4. Idempotency key replay survives retries
5. An insert error after the commit keeps the seat counted
6. A registration racing an event delete never stays active
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from uuid_utils.compat import uuid7

from src.platform.database.orm_db_setting import Database
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.service.registration.app.command.cancel_registration_use_case import (
    CancelRegistrationUseCase,
)
from src.service.registration.app.command.delete_event_use_case import DeleteEventUseCase
from src.service.registration.app.command.register_use_case import RegisterUseCase
from src.service.registration.app.dto.ticket_type_definition_dto import TicketTypeDefinition
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.registration_status import RegistrationStatus
from src.service.registration.domain.registration_errors import (
    CapacityExceededError,
    DuplicateRegistrationError,
    EventNotOpenError,
)
from src.service.registration.driven_adapter.ledger.capacity_ledger_impl import (
    CapacityLedgerImpl,
)
from src.service.registration.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.registration.driven_adapter.repo.registration_command_repo_impl import (
    RegistrationCommandRepoImpl,
)


class AckLostRegistrationRepo(RegistrationCommandRepoImpl):
    """Commits the insert, then loses the connection before answering"""

    async def create(self, *, registration: RegistrationEntity) -> RegistrationEntity:
        await super().create(registration=registration)
        raise OperationalError('COMMIT', {}, Exception('connection reset by peer'))


class DeleteBeforeInsertRegistrationRepo(RegistrationCommandRepoImpl):
    """Runs an event delete between the capacity reservation and the insert"""

    def __init__(self, *, database: Database, before_insert: Callable[[], Awaitable[object]]):
        super().__init__(session_factory=database.session)
        self.before_insert = before_insert

    async def create(self, *, registration: RegistrationEntity) -> RegistrationEntity:
        await self.before_insert()
        return await super().create(registration=registration)


@pytest.mark.integration
@pytest.mark.usefixtures('clean_database')
class TestRegistrationWorkflow:
    async def _sold_count(self, event_query_repo: EventQueryRepoImpl, ticket_type_id: int) -> int:
        ticket_type = await event_query_repo.get_ticket_type(ticket_type_id=ticket_type_id)
        assert ticket_type is not None
        return ticket_type.sold_count

    @pytest.mark.asyncio
    async def test_capacity_admits_exactly_c_confirmed(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
    ) -> None:
        """
        Core test: C + 1 sequential registrations

        Given: A ticket type with capacity 3 and no waitlist
        When: Four different participants register one after another
        Then: Three are confirmed, the fourth is sold out, sold_count is 3
        """
        # Arrange
        event = await seed_event(
            organizer.id, ticket_types=[TicketTypeDefinition(name='Standard', capacity=3)]
        )
        ticket_type_id = event.ticket_types[0].id

        # Act
        confirmed = [
            await register_use_case.register(
                user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
            )
            for _ in range(3)
        ]
        with pytest.raises(CapacityExceededError):
            await register_use_case.register(
                user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
            )

        # Assert
        assert all(r.status == RegistrationStatus.CONFIRMED for r in confirmed)
        assert await self._sold_count(event_query_repo, ticket_type_id) == 3

    @pytest.mark.asyncio
    async def test_concurrent_registrations_for_last_seat(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
    ) -> None:
        """
        Core test: Concurrency safety end to end

        Given: A ticket type with capacity 1
        When: Eight participants register at the same time
        Then: Exactly one is confirmed and sold_count is 1
        """
        # Arrange
        event = await seed_event(
            organizer.id, ticket_types=[TicketTypeDefinition(name='Last Seat', capacity=1)]
        )
        ticket_type_id = event.ticket_types[0].id

        # Act
        results = await asyncio.gather(
            *(
                register_use_case.register(
                    user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
                )
                for _ in range(8)
            ),
            return_exceptions=True,
        )

        # Assert
        confirmed = [r for r in results if isinstance(r, RegistrationEntity)]
        rejected = [r for r in results if isinstance(r, CapacityExceededError)]
        assert (len(confirmed), len(rejected)) == (1, 7)
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_registrations_hold_one_seat(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        """
        Given: One participant double-submits the same registration five times at once
        When: The requests race past the duplicate pre-check
        Then: One registration is stored, the rest are duplicates, one seat is held
        """
        # Arrange
        event = await seed_event(
            organizer.id, ticket_types=[TicketTypeDefinition(name='Standard', capacity=10)]
        )
        ticket_type_id = event.ticket_types[0].id

        # Act
        results = await asyncio.gather(
            *(
                register_use_case.register(
                    user_id=participant.id, event_id=event.id, ticket_type_id=ticket_type_id
                )
                for _ in range(5)
            ),
            return_exceptions=True,
        )

        # Assert
        stored = [r for r in results if isinstance(r, RegistrationEntity)]
        duplicates = [r for r in results if isinstance(r, DuplicateRegistrationError)]
        assert (len(stored), len(duplicates)) == (1, 4)
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_cancel_then_register_again(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        cancel_use_case: CancelRegistrationUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        """
        Given: A participant holding the only seat
        When: They cancel, cancel again, then register again
        Then:
          - The first cancel frees the seat, the second is a no-op
          - A new registration (new id) takes the seat again
        """
        # Arrange
        event = await seed_event(
            organizer.id, ticket_types=[TicketTypeDefinition(name='Solo', capacity=1)]
        )
        ticket_type_id = event.ticket_types[0].id
        first = await register_use_case.register(
            user_id=participant.id, event_id=event.id, ticket_type_id=ticket_type_id
        )

        # Act
        await cancel_use_case.cancel(registration_id=first.id, actor_id=participant.id)
        sold_after_cancel = await self._sold_count(event_query_repo, ticket_type_id)
        again = await cancel_use_case.cancel(registration_id=first.id, actor_id=participant.id)
        second = await register_use_case.register(
            user_id=participant.id, event_id=event.id, ticket_type_id=ticket_type_id
        )

        # Assert
        assert sold_after_cancel == 0
        assert again.status == RegistrationStatus.CANCELLED
        assert second.id != first.id
        assert second.status == RegistrationStatus.CONFIRMED
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_concurrent_cancels_release_once(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        cancel_use_case: CancelRegistrationUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        # Arrange
        event = await seed_event(
            organizer.id, ticket_types=[TicketTypeDefinition(name='Standard', capacity=5)]
        )
        ticket_type_id = event.ticket_types[0].id
        await register_use_case.register(
            user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
        )
        mine = await register_use_case.register(
            user_id=participant.id, event_id=event.id, ticket_type_id=ticket_type_id
        )

        # Act
        await asyncio.gather(
            *(
                cancel_use_case.cancel(registration_id=mine.id, actor_id=participant.id)
                for _ in range(4)
            )
        )

        # Assert
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_cancel_promotes_oldest_waitlisted(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        cancel_use_case: CancelRegistrationUseCase,
        registration_command_repo: RegistrationCommandRepoImpl,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
    ) -> None:
        """
        Core test: Waitlist promotion

        Given: A sold out ticket type with two waitlisted registrations
        When: The confirmed holder cancels
        Then:
          - The oldest waitlisted registration is confirmed
          - The newer one stays on the waitlist
          - sold_count is unchanged (one out, one in)
        """
        # Arrange
        event = await seed_event(
            organizer.id,
            ticket_types=[
                TicketTypeDefinition(name='Workshop', capacity=1, waitlist_enabled=True)
            ],
        )
        ticket_type_id = event.ticket_types[0].id
        holder = await register_use_case.register(
            user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
        )
        oldest = await register_use_case.register(
            user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
        )
        newer = await register_use_case.register(
            user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
        )
        assert (oldest.status, newer.status) == (RegistrationStatus.WAITLIST,) * 2

        # Act
        await cancel_use_case.cancel(registration_id=holder.id, actor_id=holder.user_id)

        # Assert
        promoted = await registration_command_repo.get_by_id(registration_id=oldest.id)
        still_waiting = await registration_command_repo.get_by_id(registration_id=newer.id)
        assert promoted.status == RegistrationStatus.CONFIRMED
        assert still_waiting.status == RegistrationStatus.WAITLIST
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_cancel_waitlisted_keeps_sold_count(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        cancel_use_case: CancelRegistrationUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
    ) -> None:
        event = await seed_event(
            organizer.id,
            ticket_types=[
                TicketTypeDefinition(name='Workshop', capacity=1, waitlist_enabled=True)
            ],
        )
        ticket_type_id = event.ticket_types[0].id
        await register_use_case.register(
            user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
        )
        waiting = await register_use_case.register(
            user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
        )

        await cancel_use_case.cancel(registration_id=waiting.id, actor_id=waiting.user_id)

        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_idempotency_key_replay_returns_same_registration(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        event_query_repo: EventQueryRepoImpl,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        # Arrange
        event = await seed_event(organizer.id, capacity=50)
        ticket_type_id = event.ticket_types[0].id

        # Act
        first = await register_use_case.register(
            user_id=participant.id,
            event_id=event.id,
            ticket_type_id=ticket_type_id,
            idempotency_key='checkout-7f3a',
        )
        replay = await register_use_case.register(
            user_id=participant.id,
            event_id=event.id,
            ticket_type_id=ticket_type_id,
            idempotency_key='checkout-7f3a',
        )

        # Assert
        assert replay.id == first.id
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1

    @pytest.mark.asyncio
    async def test_idempotency_key_reused_for_other_event_conflicts(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        first_event = await seed_event(organizer.id, title='Day 1')
        second_event = await seed_event(organizer.id, title='Day 2')
        await register_use_case.register(
            user_id=participant.id,
            event_id=first_event.id,
            ticket_type_id=first_event.ticket_types[0].id,
            idempotency_key='same-key',
        )

        with pytest.raises(ConflictError, match='Idempotency key'):
            await register_use_case.register(
                user_id=participant.id,
                event_id=second_event.id,
                ticket_type_id=second_event.ticket_types[0].id,
                idempotency_key='same-key',
            )

    @pytest.mark.asyncio
    async def test_past_or_closed_events_are_not_open(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        register_use_case: RegisterUseCase,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        past = await seed_event(
            organizer.id, start_ts=datetime.now(timezone.utc) - timedelta(days=1)
        )
        draft = await seed_event(organizer.id, status=EventStatus.DRAFT)

        for event in (past, draft):
            with pytest.raises(EventNotOpenError):
                await register_use_case.register(
                    user_id=participant.id,
                    event_id=event.id,
                    ticket_type_id=event.ticket_types[0].id,
                )

    @pytest.mark.asyncio
    async def test_insert_error_after_commit_keeps_seat_counted(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        database: Database,
        register_use_case: RegisterUseCase,
        event_query_repo: EventQueryRepoImpl,
        capacity_ledger: CapacityLedgerImpl,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        """
        Core test: Commit acknowledgement lost

        Given: A ticket type with capacity 1
        When: The insert commits but the caller sees a connection error
        Then:
          - The stored registration is returned and stays confirmed
          - sold_count still counts it, the next participant is sold out
        """
        # Arrange
        event = await seed_event(
            organizer.id, ticket_types=[TicketTypeDefinition(name='Solo', capacity=1)]
        )
        ticket_type_id = event.ticket_types[0].id
        flaky_register = RegisterUseCase(
            registration_command_repo=AckLostRegistrationRepo(session_factory=database.session),
            event_query_repo=event_query_repo,
            capacity_ledger=capacity_ledger,
        )

        # Act
        registration = await flaky_register.register(
            user_id=participant.id, event_id=event.id, ticket_type_id=ticket_type_id
        )

        # Assert
        assert registration.status == RegistrationStatus.CONFIRMED
        assert await self._sold_count(event_query_repo, ticket_type_id) == 1
        with pytest.raises(CapacityExceededError):
            await register_use_case.register(
                user_id=uuid7(), event_id=event.id, ticket_type_id=ticket_type_id
            )

    @pytest.mark.asyncio
    async def test_register_racing_event_delete_leaves_nothing_active(
        self,
        seed_event: Callable[..., Awaitable[EventEntity]],
        database: Database,
        delete_event_use_case: DeleteEventUseCase,
        event_query_repo: EventQueryRepoImpl,
        registration_command_repo: RegistrationCommandRepoImpl,
        capacity_ledger: CapacityLedgerImpl,
        organizer: UserEntity,
        participant: UserEntity,
    ) -> None:
        """
        Core test: Event deleted between reserve and insert

        Given: A participant has reserved a seat but not yet stored the registration
        When: The organizer deletes the event before the insert
        Then:
          - register raises NotFoundError
          - No active registration is left for the deleted event
        """
        # Arrange
        event = await seed_event(organizer.id)
        ticket_type_id = event.ticket_types[0].id
        racing_register = RegisterUseCase(
            registration_command_repo=DeleteBeforeInsertRegistrationRepo(
                database=database,
                before_insert=lambda: delete_event_use_case.delete_event(
                    event_id=event.id, organizer_id=organizer.id
                ),
            ),
            event_query_repo=event_query_repo,
            capacity_ledger=capacity_ledger,
        )

        # Act
        with pytest.raises(NotFoundError, match='no longer exists'):
            await racing_register.register(
                user_id=participant.id, event_id=event.id, ticket_type_id=ticket_type_id
            )

        # Assert
        assert await event_query_repo.get_by_id(event_id=event.id) is None
        assert await registration_command_repo.list_active_by_event(event_id=event.id) == []
