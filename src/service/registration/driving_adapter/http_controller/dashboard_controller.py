from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.registration.app.query.get_organizer_stats_use_case import (
    GetOrganizerStatsUseCase,
)
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.driving_adapter.http_controller.auth.role_auth import (
    require_organizer,
)
from src.service.registration.driving_adapter.http_controller.schema.dashboard_schema import (
    OrganizerStatsResponse,
)


router = APIRouter()


@router.get('/stats', status_code=status.HTTP_200_OK)
@Logger.io
async def get_organizer_stats(
    current_user: UserEntity = Depends(require_organizer),
    use_case: GetOrganizerStatsUseCase = Depends(GetOrganizerStatsUseCase.depends),
) -> OrganizerStatsResponse:
    stats = await use_case.get_stats(organizer_id=current_user.id)
    return OrganizerStatsResponse(
        total_events=stats.total_events,
        total_venues=stats.total_venues,
        total_registrations=stats.total_registrations,
        upcoming_events=stats.upcoming_events,
    )
