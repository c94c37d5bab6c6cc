from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.service.registration.app.dto.registration_view_dto import (
    EventAvailability,
    TicketAvailability,
)
from src.service.registration.app.dto.ticket_type_definition_dto import TicketTypeDefinition
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.ticket_kind import TicketKind


class TicketTypeRequest(BaseModel):
    name: str
    kind: TicketKind = TicketKind.FREE
    price: int = 0
    capacity: Optional[int] = None  # None means unlimited
    waitlist_enabled: bool = False
    description: Optional[str] = None

    def to_definition(self) -> TicketTypeDefinition:
        return TicketTypeDefinition(
            name=self.name,
            kind=self.kind,
            price=self.price,
            capacity=self.capacity,
            waitlist_enabled=self.waitlist_enabled,
            description=self.description,
        )


class EventCreateRequest(BaseModel):
    title: str
    description: Optional[str] = None
    venue_id: Optional[int] = None
    venue_name: Optional[str] = None
    venue_location: Optional[str] = None
    start_ts: datetime
    end_ts: datetime
    capacity: Optional[int] = None
    timezone: str = 'UTC'
    recurrence_rule: Optional[str] = None
    status: EventStatus = EventStatus.ACTIVE
    ticket_types: Optional[List[TicketTypeRequest]] = None

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'title': 'Python Meetup',
                'description': 'Monthly talks and pizza',
                'venue_id': 1,
                'start_ts': '2026-11-20T18:00:00Z',
                'end_ts': '2026-11-20T21:00:00Z',
                'timezone': 'Europe/Berlin',
                'ticket_types': [
                    {'name': 'General', 'kind': 'free', 'price': 0, 'capacity': 80},
                    {
                        'name': 'Supporter',
                        'kind': 'donation',
                        'price': 1000,
                        'capacity': 20,
                        'waitlist_enabled': True,
                    },
                ],
            }
        }
    )


class EventUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_ts: Optional[datetime] = None
    end_ts: Optional[datetime] = None
    capacity: Optional[int] = None
    status: Optional[EventStatus] = None
    timezone: Optional[str] = None


class TicketTypeResponse(BaseModel):
    id: int
    name: str
    kind: str
    price: int
    capacity: Optional[int] = None
    sold_count: int
    remaining: Optional[int] = None
    waitlist_enabled: bool

    @classmethod
    def from_entity(cls, ticket_type: TicketTypeEntity) -> 'TicketTypeResponse':
        if ticket_type.id is None:
            raise ValueError('Ticket type ID should not be None after persistence.')
        return cls(
            id=ticket_type.id,
            name=ticket_type.name,
            kind=ticket_type.kind.value,
            price=ticket_type.price,
            capacity=ticket_type.capacity,
            sold_count=ticket_type.sold_count,
            remaining=ticket_type.remaining,
            waitlist_enabled=ticket_type.waitlist_enabled,
        )

    @classmethod
    def from_availability(cls, ticket_type: TicketAvailability) -> 'TicketTypeResponse':
        return cls(
            id=ticket_type.id,
            name=ticket_type.name,
            kind=ticket_type.kind.value,
            price=ticket_type.price,
            capacity=ticket_type.capacity,
            sold_count=ticket_type.sold_count,
            remaining=ticket_type.remaining,
            waitlist_enabled=ticket_type.waitlist_enabled,
        )


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    venue_id: Optional[int] = None
    venue_name: Optional[str] = None
    venue_location: Optional[str] = None
    start_ts: datetime
    end_ts: datetime
    capacity: Optional[int] = None
    timezone: str
    recurrence_rule: Optional[str] = None
    status: str
    organizer_id: UUID
    ticket_types: List[TicketTypeResponse] = []

    @classmethod
    def from_entity(cls, event: EventEntity) -> 'EventResponse':
        return cls._build(
            event, [TicketTypeResponse.from_entity(t) for t in event.ticket_types]
        )

    @classmethod
    def from_availability(cls, availability: EventAvailability) -> 'EventResponse':
        return cls._build(
            availability.event,
            [TicketTypeResponse.from_availability(t) for t in availability.ticket_types],
        )

    @classmethod
    def _build(
        cls, event: EventEntity, ticket_types: List[TicketTypeResponse]
    ) -> 'EventResponse':
        if event.id is None:
            raise ValueError('Event ID should not be None after creation.')
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            venue_id=event.venue_id,
            venue_name=event.venue_name,
            venue_location=event.venue_location,
            start_ts=event.start_ts,
            end_ts=event.end_ts,
            capacity=event.capacity,
            timezone=event.timezone,
            recurrence_rule=event.recurrence_rule,
            status=event.status.value,
            organizer_id=event.organizer_id,
            ticket_types=ticket_types,
        )


class EventDeleteResponse(BaseModel):
    id: int
    cancelled_registrations: int
