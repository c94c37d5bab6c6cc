from datetime import datetime
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now


def _validate_name(instance: 'VenueEntity', attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise DomainError('Venue name is required')


def _validate_capacity(instance: 'VenueEntity', attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise DomainError('Venue capacity must be a positive integer')


@attrs.define
class VenueEntity:
    name: str = attrs.field(validator=_validate_name)
    capacity: int = attrs.field(validator=_validate_capacity)
    owner_id: UUID
    location: Optional[str] = None
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        name: str,
        capacity: int,
        owner_id: UUID,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> 'VenueEntity':
        now = utc_now()
        return cls(
            name=name.strip(),
            capacity=capacity,
            owner_id=owner_id,
            location=location,
            description=description,
            created_at=now,
            updated_at=now,
        )

    def ensure_owned_by(self, user_id: UUID) -> None:
        if self.owner_id != user_id:
            raise ForbiddenError('Only the venue owner can modify this venue')

    def ensure_can_host(self, capacity: Optional[int]) -> None:
        if capacity is not None and capacity > self.capacity:
            raise DomainError(f'Event capacity {capacity} exceeds venue capacity {self.capacity}')

    @Logger.io
    def update(
        self,
        *,
        name: Optional[str] = None,
        capacity: Optional[int] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> 'VenueEntity':
        # attrs.evolve re-runs the field validators
        return attrs.evolve(
            self,
            name=self.name if name is None else name.strip(),
            capacity=self.capacity if capacity is None else capacity,
            location=self.location if location is None else location,
            description=self.description if description is None else description,
            updated_at=utc_now(),
        )
