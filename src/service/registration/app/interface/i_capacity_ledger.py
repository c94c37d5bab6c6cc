from abc import ABC, abstractmethod
from uuid import UUID

from src.service.registration.domain.value_object.reservation import Release, Reservation


class ICapacityLedger(ABC):
    """
    Sole writer of ticket_type.sold_count.

    Every unit of sold capacity is backed by one ledger entry keyed by the
    reservation id, which makes both operations safe to retry.
    """

    @abstractmethod
    async def try_reserve(self, *, ticket_type_id: int, reservation_id: UUID) -> Reservation:
        """
        Atomically claim one unit of capacity.

        Raises:
            CapacityExceededError: When sold_count already equals capacity
            NotFoundError: When the ticket type does not exist
        """

    @abstractmethod
    async def release(self, *, reservation_id: UUID) -> Release:
        """Return one unit of capacity, at most once per reservation id"""
