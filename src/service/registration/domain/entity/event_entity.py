from datetime import datetime
from typing import List, Optional
from uuid import UUID
import zoneinfo

import attrs

from src.platform.exception.exceptions import DomainError, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import to_utc, utc_now
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.registration_errors import EventNotOpenError


def _validate_non_empty_string(instance: 'EventEntity', attribute: attrs.Attribute, value: str):
    if not value or not value.strip():
        raise DomainError(f'Event {attribute.name} is required')


def _validate_timezone(instance: 'EventEntity', attribute: attrs.Attribute, value: str):
    try:
        zoneinfo.ZoneInfo(value)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        raise DomainError(f'Unknown timezone: {value}')


def _validate_capacity(instance: 'EventEntity', attribute: attrs.Attribute, value: Optional[int]):
    if value is not None and value <= 0:
        raise DomainError('Event capacity must be a positive integer')


@attrs.define
class EventEntity:
    title: str = attrs.field(validator=_validate_non_empty_string)
    organizer_id: UUID
    start_ts: datetime = attrs.field(converter=to_utc)
    end_ts: datetime = attrs.field(converter=to_utc)
    description: Optional[str] = None
    venue_id: Optional[int] = None
    venue_name: Optional[str] = None
    venue_location: Optional[str] = None
    capacity: Optional[int] = attrs.field(default=None, validator=_validate_capacity)
    timezone: str = attrs.field(default='UTC', validator=_validate_timezone)
    recurrence_rule: Optional[str] = None
    status: EventStatus = EventStatus.ACTIVE
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ticket_types: List[TicketTypeEntity] = attrs.field(factory=list)

    def __attrs_post_init__(self) -> None:
        if self.end_ts <= self.start_ts:
            raise DomainError('End time must be after start time')

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        title: str,
        organizer_id: UUID,
        start_ts: datetime,
        end_ts: datetime,
        description: Optional[str] = None,
        venue_id: Optional[int] = None,
        venue_name: Optional[str] = None,
        venue_location: Optional[str] = None,
        capacity: Optional[int] = None,
        timezone: str = 'UTC',
        recurrence_rule: Optional[str] = None,
        status: EventStatus = EventStatus.ACTIVE,
    ) -> 'EventEntity':
        if venue_id is None and not (venue_name and venue_name.strip()):
            raise DomainError('Event needs a venue or a venue name')

        now = utc_now()
        return cls(
            title=title.strip(),
            organizer_id=organizer_id,
            start_ts=start_ts,
            end_ts=end_ts,
            description=description,
            venue_id=venue_id,
            venue_name=venue_name,
            venue_location=venue_location,
            capacity=capacity,
            timezone=timezone,
            recurrence_rule=recurrence_rule,
            status=status,
            created_at=now,
            updated_at=now,
        )

    def ensure_owned_by(self, user_id: UUID) -> None:
        if self.organizer_id != user_id:
            raise ForbiddenError('Only the event organizer can manage this event')

    def ensure_open_for_registration(self, *, now: Optional[datetime] = None) -> None:
        """
        Raises:
            EventNotOpenError: When the event is not active or has already started
        """
        if self.status != EventStatus.ACTIVE:
            raise EventNotOpenError(f'Event is {self.status.value}, registration is closed')
        if self.start_ts <= (now or utc_now()):
            raise EventNotOpenError('Event has already started')

    def find_ticket_type(self, ticket_type_id: int) -> Optional[TicketTypeEntity]:
        return next((t for t in self.ticket_types if t.id == ticket_type_id), None)

    @Logger.io
    def update(
        self,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start_ts: Optional[datetime] = None,
        end_ts: Optional[datetime] = None,
        capacity: Optional[int] = None,
        status: Optional[EventStatus] = None,
        timezone: Optional[str] = None,
    ) -> 'EventEntity':
        # evolve re-runs validators and the end > start check
        return attrs.evolve(
            self,
            title=self.title if title is None else title.strip(),
            description=self.description if description is None else description,
            start_ts=self.start_ts if start_ts is None else start_ts,
            end_ts=self.end_ts if end_ts is None else end_ts,
            capacity=self.capacity if capacity is None else capacity,
            status=self.status if status is None else status,
            timezone=self.timezone if timezone is None else timezone,
            updated_at=utc_now(),
        )
