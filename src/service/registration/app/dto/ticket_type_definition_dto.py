from typing import Optional

import attrs

from src.service.registration.domain.enum.ticket_kind import TicketKind


@attrs.define(frozen=True)
class TicketTypeDefinition:
    """Ticket type as requested by an organizer, before it belongs to a stored event"""

    name: str
    kind: TicketKind = TicketKind.FREE
    price: int = 0
    capacity: Optional[int] = None
    waitlist_enabled: bool = False
    description: Optional[str] = None
