from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.registration.app.command.manage_venue_use_case import ManageVenueUseCase
from src.service.registration.app.query.list_venues_use_case import ListVenuesUseCase
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.driving_adapter.http_controller.auth.role_auth import (
    require_organizer,
)
from src.service.registration.driving_adapter.http_controller.schema.venue_schema import (
    VenueCreateRequest,
    VenueResponse,
    VenueUpdateRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_venue(
    request: VenueCreateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ManageVenueUseCase = Depends(ManageVenueUseCase.depends),
) -> VenueResponse:
    with tracer.start_as_current_span('controller.create_venue'):
        venue = await use_case.create(
            owner_id=current_user.id,
            name=request.name,
            capacity=request.capacity,
            location=request.location,
            description=request.description,
        )
        return VenueResponse.from_entity(venue)


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_venues(
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListVenuesUseCase = Depends(ListVenuesUseCase.depends),
) -> List[VenueResponse]:
    venues = await use_case.list_by_owner(owner_id=current_user.id)
    return [VenueResponse.from_entity(v) for v in venues]


@router.get('/{venue_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_venue(
    venue_id: int,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListVenuesUseCase = Depends(ListVenuesUseCase.depends),
) -> VenueResponse:
    venue = await use_case.get_by_id(venue_id=venue_id)
    venue.ensure_owned_by(current_user.id)
    return VenueResponse.from_entity(venue)


@router.put('/{venue_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def update_venue(
    venue_id: int,
    request: VenueUpdateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ManageVenueUseCase = Depends(ManageVenueUseCase.depends),
) -> VenueResponse:
    venue = await use_case.update(
        venue_id=venue_id,
        owner_id=current_user.id,
        name=request.name,
        capacity=request.capacity,
        location=request.location,
        description=request.description,
    )
    return VenueResponse.from_entity(venue)


@router.delete('/{venue_id}', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def delete_venue(
    venue_id: int,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ManageVenueUseCase = Depends(ManageVenueUseCase.depends),
) -> None:
    await use_case.delete(venue_id=venue_id, owner_id=current_user.id)
