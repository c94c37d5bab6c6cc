from fastapi import Depends
from opentelemetry import trace

from src.platform.exception.exceptions import ForbiddenError
from src.service.registration.domain.entity.user_entity import UserEntity, UserRole
from src.service.registration.driving_adapter.http_controller.user_controller import (
    get_current_user as get_user_from_controller,
)


class RoleAuthStrategy:
    @staticmethod
    def can_manage_catalog(user: UserEntity) -> bool:
        return user.role == UserRole.ORGANIZER

    @staticmethod
    def can_register(user: UserEntity) -> bool:
        return user.role == UserRole.PARTICIPANT


async def get_current_user(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    return current_user


async def require_organizer(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_organizer',
        attributes={'user.id': str(current_user.id), 'user.role': current_user.role.value},
    ):
        if not RoleAuthStrategy.can_manage_catalog(current_user):
            raise ForbiddenError('Only organizers can perform this action')
        return current_user


async def require_participant(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    if not RoleAuthStrategy.can_register(current_user):
        raise ForbiddenError('Only participants can register for events')
    return current_user
