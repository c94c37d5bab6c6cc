"""Application layer DTOs"""

from src.service.registration.app.dto.registration_view_dto import (
    EventAvailability,
    OrganizerStats,
    RegistrationDetail,
    TicketAvailability,
)
from src.service.registration.app.dto.ticket_type_definition_dto import TicketTypeDefinition

__all__ = [
    'EventAvailability',
    'OrganizerStats',
    'RegistrationDetail',
    'TicketAvailability',
    'TicketTypeDefinition',
]
