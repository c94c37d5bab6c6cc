from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


_ACTIVE_STATUS_CLAUSE = "status IN ('confirmed', 'waitlist')"


class RegistrationModel(Base):
    """
    Registrations outlive their event, so event_id and ticket_type_id carry
    no foreign key. Cancelled rows stay as history.
    """

    __tablename__ = 'registration'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    ticket_type_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default='confirmed', nullable=False)
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        Index(
            'uq_registration_active',
            'user_id',
            'event_id',
            'ticket_type_id',
            unique=True,
            postgresql_where=text(_ACTIVE_STATUS_CLAUSE),
            sqlite_where=text(_ACTIVE_STATUS_CLAUSE),
        ),
        Index(
            'uq_registration_idempotency_key',
            'user_id',
            'idempotency_key',
            unique=True,
            postgresql_where=text('idempotency_key IS NOT NULL'),
            sqlite_where=text('idempotency_key IS NOT NULL'),
        ),
        Index('ix_registration_waitlist_fifo', 'ticket_type_id', 'status', 'created_at'),
    )
