from enum import Enum
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError


class UserRole(str, Enum):
    ORGANIZER = 'organizer'
    PARTICIPANT = 'participant'


@attrs.define
class UserEntity:
    """Identity supplied by the external identity provider, stored as a profile"""

    id: UUID
    email: str = ''
    display_name: Optional[str] = None
    role: UserRole = UserRole.PARTICIPANT

    @property
    def is_organizer(self) -> bool:
        return self.role == UserRole.ORGANIZER

    @property
    def is_participant(self) -> bool:
        return self.role == UserRole.PARTICIPANT

    @staticmethod
    def validate_role(role: str) -> UserRole:
        """Validate if the role is valid"""
        valid_roles = [r.value for r in UserRole.__members__.values()]
        if role not in valid_roles:
            raise DomainError(f'Invalid role: {role}. Must be one of: {", ".join(valid_roles)}')
        return UserRole(role)
