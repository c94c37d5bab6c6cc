"""Registration Domain Value Objects"""

from src.service.registration.domain.value_object.reservation import Release, Reservation

__all__ = ['Release', 'Reservation']
