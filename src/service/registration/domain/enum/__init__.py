"""Registration Domain Enums"""

from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.registration_status import (
    ACTIVE_REGISTRATION_STATUSES,
    RegistrationStatus,
)
from src.service.registration.domain.enum.reservation_status import ReservationStatus
from src.service.registration.domain.enum.ticket_kind import TicketKind

__all__ = [
    'ACTIVE_REGISTRATION_STATUSES',
    'EventStatus',
    'RegistrationStatus',
    'ReservationStatus',
    'TicketKind',
]
