from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.registration.app.interface.i_profile_repo import IProfileRepo
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.driven_adapter.model.profile_model import ProfileModel
from src.service.registration.driven_adapter.repo.entity_mapper import profile_model_to_entity


class ProfileRepoImpl(IProfileRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def upsert(self, *, user: UserEntity) -> UserEntity:
        try:
            return await self._upsert(user)
        except IntegrityError:
            # First request of the same user raced us to the insert
            return await self._upsert(user)

    async def _upsert(self, user: UserEntity) -> UserEntity:
        async with self.session_factory() as session:
            model = await session.get(ProfileModel, user.id)
            if model is None:
                model = ProfileModel(id=user.id)
                session.add(model)

            model.email = user.email
            model.display_name = user.display_name
            model.role = user.role.value
            model.updated_at = utc_now()
            await session.commit()

            return profile_model_to_entity(model)

    @Logger.io
    async def get_by_id(self, *, user_id: UUID) -> Optional[UserEntity]:
        async with self.session_factory() as session:
            model = await session.get(ProfileModel, user_id)
            return profile_model_to_entity(model) if model else None
