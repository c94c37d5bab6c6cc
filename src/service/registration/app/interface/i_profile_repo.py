from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.service.registration.domain.entity.user_entity import UserEntity


class IProfileRepo(ABC):
    @abstractmethod
    async def upsert(self, *, user: UserEntity) -> UserEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, user_id: UUID) -> Optional[UserEntity]:
        pass
