from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from src.service.registration.driven_adapter.model.event_model import EventModel


class TicketTypeModel(Base):
    __tablename__ = 'ticket_type'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(String(20), default='free', nullable=False)
    price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Written only by the capacity ledger
    sold_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    waitlist_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    event: Mapped['EventModel'] = relationship('EventModel', back_populates='ticket_types')

    __table_args__ = (
        CheckConstraint('sold_count >= 0', name='ck_ticket_type_sold_count_non_negative'),
        CheckConstraint(
            'capacity IS NULL OR sold_count <= capacity', name='ck_ticket_type_sold_count_capacity'
        ),
        CheckConstraint('price >= 0', name='ck_ticket_type_price_non_negative'),
    )
