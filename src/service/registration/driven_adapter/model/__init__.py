"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.registration.driven_adapter.model.capacity_reservation_model import (
    CapacityReservationModel,
)
from src.service.registration.driven_adapter.model.event_model import EventModel
from src.service.registration.driven_adapter.model.profile_model import ProfileModel
from src.service.registration.driven_adapter.model.registration_model import RegistrationModel
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.registration.driven_adapter.model.venue_model import VenueModel

__all__ = [
    'CapacityReservationModel',
    'EventModel',
    'ProfileModel',
    'RegistrationModel',
    'TicketTypeModel',
    'VenueModel',
]
