from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.registration.app.command.cancel_registration_use_case import (
    CancelRegistrationUseCase,
)
from src.service.registration.app.command.register_use_case import RegisterUseCase
from src.service.registration.app.command.sync_profile_use_case import SyncProfileUseCase
from src.service.registration.app.query.list_registrations_use_case import (
    ListRegistrationsUseCase,
)
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_organizer,
    require_participant,
)
from src.service.registration.driving_adapter.http_controller.schema.registration_schema import (
    RegistrationCreateRequest,
    RegistrationDetailResponse,
    RegistrationResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def register(
    request: RegistrationCreateRequest,
    idempotency_key: Optional[str] = Header(None, alias='Idempotency-Key'),
    current_user: UserEntity = Depends(require_participant),
    sync_profile: SyncProfileUseCase = Depends(SyncProfileUseCase.depends),
    use_case: RegisterUseCase = Depends(RegisterUseCase.depends),
) -> RegistrationResponse:
    with tracer.start_as_current_span(
        'controller.register',
        attributes={'event.id': request.event_id, 'ticket_type.id': request.ticket_type_id},
    ):
        await sync_profile.sync(user=current_user)
        registration = await use_case.register(
            user_id=current_user.id,
            event_id=request.event_id,
            ticket_type_id=request.ticket_type_id,
            idempotency_key=request.idempotency_key or idempotency_key,
        )
        return RegistrationResponse.from_entity(registration)


@router.get('/mine', status_code=status.HTTP_200_OK)
@Logger.io
async def list_my_registrations(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListRegistrationsUseCase = Depends(ListRegistrationsUseCase.depends),
) -> List[RegistrationDetailResponse]:
    details = await use_case.list_mine(user_id=current_user.id)
    return [RegistrationDetailResponse.from_detail(d) for d in details]


@router.get('/roll', status_code=status.HTTP_200_OK)
@Logger.io
async def list_organizer_roll(
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListRegistrationsUseCase = Depends(ListRegistrationsUseCase.depends),
) -> List[RegistrationDetailResponse]:
    details = await use_case.list_organizer_roll(organizer_id=current_user.id)
    return [RegistrationDetailResponse.from_detail(d) for d in details]


@router.patch('/{registration_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_registration(
    registration_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CancelRegistrationUseCase = Depends(CancelRegistrationUseCase.depends),
) -> RegistrationResponse:
    with tracer.start_as_current_span(
        'controller.cancel_registration',
        attributes={'registration.id': str(registration_id)},
    ):
        registration = await use_case.cancel(
            registration_id=registration_id, actor_id=current_user.id
        )
        return RegistrationResponse.from_entity(registration)
