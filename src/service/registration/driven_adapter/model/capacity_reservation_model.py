from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class CapacityReservationModel(Base):
    """Ledger entry: one row per unit of sold capacity, keyed by the registration id"""

    __tablename__ = 'capacity_reservation'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    ticket_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('ticket_type.id', ondelete='CASCADE'), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default='held', nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    released_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
