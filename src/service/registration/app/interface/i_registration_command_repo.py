from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.enum.registration_status import RegistrationStatus


class IRegistrationCommandRepo(ABC):
    """Registration write side, always on the primary database"""

    @abstractmethod
    async def get_by_id(self, *, registration_id: UUID) -> Optional[RegistrationEntity]:
        pass

    @abstractmethod
    async def get_by_idempotency_key(
        self, *, user_id: UUID, idempotency_key: str
    ) -> Optional[RegistrationEntity]:
        pass

    @abstractmethod
    async def find_active(
        self, *, user_id: UUID, event_id: int, ticket_type_id: int
    ) -> Optional[RegistrationEntity]:
        pass

    @abstractmethod
    async def create(self, *, registration: RegistrationEntity) -> RegistrationEntity:
        """
        Raises:
            DuplicateRegistrationError: When the active-registration unique index rejects the row
            NotFoundError: When the ticket type was deleted before the insert committed
        """

    @abstractmethod
    async def compare_and_set_status(
        self,
        *,
        registration_id: UUID,
        expected: RegistrationStatus,
        new_status: RegistrationStatus,
    ) -> bool:
        """Move `expected` to `new_status`, False when the row was no longer `expected`"""

    @abstractmethod
    async def list_waitlisted(self, *, ticket_type_id: int, limit: int) -> List[RegistrationEntity]:
        """Oldest first"""

    @abstractmethod
    async def list_active_by_event(self, *, event_id: int) -> List[RegistrationEntity]:
        pass
