"""Model <-> entity conversion shared by the registration repositories"""

from src.platform.types.utc_datetime import to_utc, to_utc_or_none
from src.service.registration.app.dto.registration_view_dto import (
    EventAvailability,
    TicketAvailability,
)
from src.service.registration.domain.entity.event_entity import EventEntity
from src.service.registration.domain.entity.registration_entity import RegistrationEntity
from src.service.registration.domain.entity.ticket_type_entity import TicketTypeEntity
from src.service.registration.domain.entity.user_entity import UserEntity, UserRole
from src.service.registration.domain.entity.venue_entity import VenueEntity
from src.service.registration.domain.enum.event_status import EventStatus
from src.service.registration.domain.enum.registration_status import RegistrationStatus
from src.service.registration.domain.enum.ticket_kind import TicketKind
from src.service.registration.driven_adapter.model.event_model import EventModel
from src.service.registration.driven_adapter.model.profile_model import ProfileModel
from src.service.registration.driven_adapter.model.registration_model import RegistrationModel
from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.registration.driven_adapter.model.venue_model import VenueModel


def ticket_type_model_to_entity(model: TicketTypeModel) -> TicketTypeEntity:
    return TicketTypeEntity(
        id=model.id,
        event_id=model.event_id,
        name=model.name,
        description=model.description,
        kind=TicketKind(model.kind),
        price=model.price,
        capacity=model.capacity,
        sold_count=model.sold_count,
        waitlist_enabled=model.waitlist_enabled,
        created_at=to_utc_or_none(model.created_at),
    )


def event_model_to_entity(model: EventModel) -> EventEntity:
    return EventEntity(
        id=model.id,
        title=model.title,
        description=model.description,
        organizer_id=model.organizer_id,
        venue_id=model.venue_id,
        venue_name=model.venue_name,
        venue_location=model.venue_location,
        start_ts=model.start_ts,
        end_ts=model.end_ts,
        capacity=model.capacity,
        timezone=model.timezone,
        recurrence_rule=model.recurrence_rule,
        status=EventStatus(model.status),
        created_at=to_utc_or_none(model.created_at),
        updated_at=to_utc_or_none(model.updated_at),
        ticket_types=[ticket_type_model_to_entity(t) for t in model.ticket_types],
    )


def event_model_to_availability(model: EventModel) -> EventAvailability:
    event = event_model_to_entity(model)
    return EventAvailability(
        event=event,
        ticket_types=[
            TicketAvailability(
                id=t.id,
                name=t.name,
                kind=t.kind,
                price=t.price,
                capacity=t.capacity,
                sold_count=t.sold_count,
                remaining=t.remaining,
                waitlist_enabled=t.waitlist_enabled,
            )
            for t in event.ticket_types
        ],
    )


def registration_model_to_entity(model: RegistrationModel) -> RegistrationEntity:
    return RegistrationEntity(
        id=model.id,
        user_id=model.user_id,
        event_id=model.event_id,
        ticket_type_id=model.ticket_type_id,
        status=RegistrationStatus(model.status),
        idempotency_key=model.idempotency_key,
        created_at=to_utc(model.created_at),
        updated_at=to_utc_or_none(model.updated_at),
    )


def venue_model_to_entity(model: VenueModel) -> VenueEntity:
    return VenueEntity(
        id=model.id,
        name=model.name,
        location=model.location,
        capacity=model.capacity,
        description=model.description,
        owner_id=model.owner_id,
        created_at=to_utc_or_none(model.created_at),
        updated_at=to_utc_or_none(model.updated_at),
    )


def profile_model_to_entity(model: ProfileModel) -> UserEntity:
    return UserEntity(
        id=model.id,
        email=model.email,
        display_name=model.display_name,
        role=UserRole(model.role),
    )
