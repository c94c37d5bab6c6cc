from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.service.registration.domain.entity.venue_entity import VenueEntity


class VenueCreateRequest(BaseModel):
    name: str
    capacity: int
    location: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'name': 'Community Hall',
                'capacity': 120,
                'location': '12 Main Street',
                'description': 'Ground floor, step-free access',
            }
        }
    )


class VenueUpdateRequest(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = None
    location: Optional[str] = None
    description: Optional[str] = None


class VenueResponse(BaseModel):
    id: int
    name: str
    capacity: int
    location: Optional[str] = None
    description: Optional[str] = None
    owner_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, venue: VenueEntity) -> 'VenueResponse':
        if venue.id is None:
            raise ValueError('Venue ID should not be None after persistence.')
        return cls(
            id=venue.id,
            name=venue.name,
            capacity=venue.capacity,
            location=venue.location,
            description=venue.description,
            owner_id=venue.owner_id,
            created_at=venue.created_at,
            updated_at=venue.updated_at,
        )
