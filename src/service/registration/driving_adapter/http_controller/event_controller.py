from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.registration.app.command.add_ticket_type_use_case import AddTicketTypeUseCase
from src.service.registration.app.command.create_event_use_case import CreateEventUseCase
from src.service.registration.app.command.delete_event_use_case import DeleteEventUseCase
from src.service.registration.app.command.update_event_use_case import UpdateEventUseCase
from src.service.registration.app.query.list_events_use_case import ListEventsUseCase
from src.service.registration.app.query.list_registrations_use_case import (
    ListRegistrationsUseCase,
)
from src.service.registration.domain.entity.user_entity import UserEntity
from src.service.registration.driving_adapter.http_controller.auth.role_auth import (
    require_organizer,
)
from src.service.registration.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventDeleteResponse,
    EventResponse,
    EventUpdateRequest,
    TicketTypeRequest,
    TicketTypeResponse,
)
from src.service.registration.driving_adapter.http_controller.schema.registration_schema import (
    RegistrationDetailResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    with tracer.start_as_current_span('controller.create_event'):
        event = await use_case.create_event(
            organizer_id=current_user.id,
            title=request.title,
            description=request.description,
            venue_id=request.venue_id,
            venue_name=request.venue_name,
            venue_location=request.venue_location,
            start_ts=request.start_ts,
            end_ts=request.end_ts,
            capacity=request.capacity,
            timezone=request.timezone,
            recurrence_rule=request.recurrence_rule,
            status=request.status,
            ticket_types=[t.to_definition() for t in request.ticket_types or []],
        )
        return EventResponse.from_entity(event)


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_open_events(
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    """Upcoming active events with remaining capacity per ticket type"""
    events = await use_case.list_open()
    return [EventResponse.from_availability(e) for e in events]


@router.get('/mine', status_code=status.HTTP_200_OK)
@Logger.io
async def list_my_events(
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    events = await use_case.list_by_organizer(organizer_id=current_user.id)
    return [EventResponse.from_availability(e) for e in events]


@router.get('/{event_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_event(
    event_id: int,
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> EventResponse:
    event = await use_case.get_by_id(event_id=event_id)
    return EventResponse.from_availability(event)


@router.patch('/{event_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def update_event(
    event_id: int,
    request: EventUpdateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: UpdateEventUseCase = Depends(UpdateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.update_event(
        event_id=event_id,
        organizer_id=current_user.id,
        title=request.title,
        description=request.description,
        start_ts=request.start_ts,
        end_ts=request.end_ts,
        capacity=request.capacity,
        status=request.status,
        timezone=request.timezone,
    )
    return EventResponse.from_entity(event)


@router.delete('/{event_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def delete_event(
    event_id: int,
    current_user: UserEntity = Depends(require_organizer),
    use_case: DeleteEventUseCase = Depends(DeleteEventUseCase.depends),
) -> EventDeleteResponse:
    with tracer.start_as_current_span('controller.delete_event'):
        cancelled = await use_case.delete_event(event_id=event_id, organizer_id=current_user.id)
        return EventDeleteResponse(id=event_id, cancelled_registrations=cancelled)


@router.post('/{event_id}/ticket_type', status_code=status.HTTP_201_CREATED)
@Logger.io
async def add_ticket_type(
    event_id: int,
    request: TicketTypeRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: AddTicketTypeUseCase = Depends(AddTicketTypeUseCase.depends),
) -> TicketTypeResponse:
    ticket_type = await use_case.add_ticket_type(
        event_id=event_id, organizer_id=current_user.id, definition=request.to_definition()
    )
    return TicketTypeResponse.from_entity(ticket_type)


@router.get('/{event_id}/registrations', status_code=status.HTTP_200_OK)
@Logger.io
async def list_event_registrations(
    event_id: int,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListRegistrationsUseCase = Depends(ListRegistrationsUseCase.depends),
) -> List[RegistrationDetailResponse]:
    details = await use_case.list_event_roll(event_id=event_id, organizer_id=current_user.id)
    return [RegistrationDetailResponse.from_detail(d) for d in details]
