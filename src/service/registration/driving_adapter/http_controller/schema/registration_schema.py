from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.service.registration.app.dto.registration_view_dto import RegistrationDetail
from src.service.registration.domain.entity.registration_entity import RegistrationEntity


class RegistrationCreateRequest(BaseModel):
    event_id: int
    ticket_type_id: int
    idempotency_key: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'event_id': 1,
                'ticket_type_id': 1,
                'idempotency_key': 'c6a1f3e2-signup-form-submit',
            }
        }
    )


class RegistrationResponse(BaseModel):
    id: UUID
    user_id: UUID
    event_id: int
    ticket_type_id: int
    status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, registration: RegistrationEntity) -> 'RegistrationResponse':
        return cls(
            id=registration.id,
            user_id=registration.user_id,
            event_id=registration.event_id,
            ticket_type_id=registration.ticket_type_id,
            status=registration.status.value,
            created_at=registration.created_at,
        )


class RegistrationDetailResponse(BaseModel):
    id: UUID
    user_id: UUID
    event_id: int
    ticket_type_id: int
    status: str
    created_at: datetime
    event_title: Optional[str] = None
    event_start_ts: Optional[datetime] = None
    venue_name: Optional[str] = None
    ticket_type_name: Optional[str] = None
    ticket_kind: Optional[str] = None
    participant_name: Optional[str] = None
    participant_email: Optional[str] = None

    @classmethod
    def from_detail(cls, detail: RegistrationDetail) -> 'RegistrationDetailResponse':
        return cls(
            id=detail.id,
            user_id=detail.user_id,
            event_id=detail.event_id,
            ticket_type_id=detail.ticket_type_id,
            status=detail.status.value,
            created_at=detail.created_at,
            event_title=detail.event_title,
            event_start_ts=detail.event_start_ts,
            venue_name=detail.venue_name,
            ticket_type_name=detail.ticket_type_name,
            ticket_kind=detail.ticket_kind.value if detail.ticket_kind else None,
            participant_name=detail.participant_name,
            participant_email=detail.participant_email,
        )
