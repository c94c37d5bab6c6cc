from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from src.service.registration.driven_adapter.model.ticket_type_model import TicketTypeModel


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Restrict: a referenced venue cannot be deleted
    venue_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('venue.id', ondelete='RESTRICT'), nullable=True, index=True
    )
    venue_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    venue_location: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    start_ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), default='UTC', nullable=False)
    recurrence_rule: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default='active', nullable=False, index=True)
    organizer_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    ticket_types: Mapped[List['TicketTypeModel']] = relationship(
        'TicketTypeModel',
        back_populates='event',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='TicketTypeModel.id',
        lazy='selectin',
    )
