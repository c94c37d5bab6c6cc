"""Read-side projections returned by the query facade."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

import attrs

from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.enum.registration_status import RegistrationStatus
from src.service.registration.domain.enum.ticket_kind import TicketKind


@attrs.define(frozen=True)
class TicketAvailability:
    id: int
    name: str
    kind: TicketKind
    price: int
    capacity: Optional[int]
    sold_count: int
    remaining: Optional[int]  # None means unlimited
    waitlist_enabled: bool


@attrs.define(frozen=True)
class EventAvailability:
    event: EventEntity
    ticket_types: List[TicketAvailability] = attrs.field(factory=list)


@attrs.define(frozen=True)
class RegistrationDetail:
    """A registration joined with its event, ticket type and participant"""

    id: UUID
    user_id: UUID
    event_id: int
    ticket_type_id: int
    status: RegistrationStatus
    created_at: datetime
    event_title: Optional[str] = None
    event_start_ts: Optional[datetime] = None
    venue_name: Optional[str] = None
    ticket_type_name: Optional[str] = None
    ticket_kind: Optional[TicketKind] = None
    participant_name: Optional[str] = None
    participant_email: Optional[str] = None


@attrs.define(frozen=True)
class OrganizerStats:
    total_events: int = 0
    total_venues: int = 0
    total_registrations: int = 0
    upcoming_events: int = 0
