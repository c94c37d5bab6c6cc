from enum import StrEnum


class EventStatus(StrEnum):
    """Only ACTIVE events accept registrations"""

    DRAFT = 'draft'
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
