from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.types.utc_datetime import utc_now
from src.service.registration.domain.enum.ticket_kind import TicketKind


@attrs.define
class TicketTypeEntity:
    """
    Reservable category within an event.

    `sold_count` is owned by the capacity ledger: entities only carry the value
    read from the store, they never change it.
    """

    event_id: Optional[int]
    name: str
    kind: TicketKind = TicketKind.FREE
    price: int = 0
    capacity: Optional[int] = None  # None means unlimited
    sold_count: int = 0
    waitlist_enabled: bool = False
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        event_id: Optional[int],
        name: str,
        kind: TicketKind = TicketKind.FREE,
        price: int = 0,
        capacity: Optional[int] = None,
        waitlist_enabled: bool = False,
        description: Optional[str] = None,
    ) -> 'TicketTypeEntity':
        cls.validate_definition(name=name, kind=kind, price=price, capacity=capacity)
        return cls(
            event_id=event_id,
            name=name.strip(),
            kind=kind,
            price=price,
            capacity=capacity,
            sold_count=0,
            waitlist_enabled=waitlist_enabled,
            description=description,
            created_at=utc_now(),
        )

    @staticmethod
    def validate_definition(
        *, name: str, kind: TicketKind, price: int, capacity: Optional[int]
    ) -> None:
        if not name or not name.strip():
            raise DomainError('Ticket type name is required')
        if price < 0:
            raise DomainError('Ticket price must not be negative')
        if kind == TicketKind.FREE and price != 0:
            raise DomainError('Free tickets must have price 0')
        if kind != TicketKind.FREE and price == 0:
            raise DomainError(f'{kind.value.capitalize()} tickets must have a positive price')
        if capacity is not None and capacity <= 0:
            raise DomainError('Ticket capacity must be a positive integer')

    @property
    def is_unlimited(self) -> bool:
        return self.capacity is None

    @property
    def remaining(self) -> Optional[int]:
        if self.capacity is None:
            return None
        return max(self.capacity - self.sold_count, 0)

    @property
    def is_sold_out(self) -> bool:
        return self.capacity is not None and self.sold_count >= self.capacity
