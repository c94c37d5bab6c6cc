"""init_registration_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- venue: Organizer-owned venues
- event: Events, venue reference (RESTRICT) or denormalised venue name
- ticket_type: Reservable categories per event (ON DELETE CASCADE from event)
- registration: User x ticket type, one active row per triple (partial unique index)
- capacity_reservation: Ledger entries backing sold_count (ON DELETE CASCADE from ticket_type)
- profile: Identity projection from the external identity provider
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACTIVE_STATUS_CLAUSE = "status IN ('confirmed', 'waitlist')"


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    """Create all tables with final schema."""

    # ========== STEP 1: Catalog ==========

    op.create_table(
        'venue',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=512), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_venue_name'), 'venue', ['name'])
    op.create_index(op.f('ix_venue_owner_id'), 'venue', ['owner_id'])

    op.create_table(
        'event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('venue_id', sa.Integer(), nullable=True),
        sa.Column('venue_name', sa.String(length=255), nullable=True),
        sa.Column('venue_location', sa.String(length=512), nullable=True),
        sa.Column('start_ts', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_ts', sa.DateTime(timezone=True), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('recurrence_rule', sa.String(length=512), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('organizer_id', sa.Uuid(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['venue_id'], ['venue.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_event_venue_id'), 'event', ['venue_id'])
    op.create_index(op.f('ix_event_start_ts'), 'event', ['start_ts'])
    op.create_index(op.f('ix_event_status'), 'event', ['status'])
    op.create_index(op.f('ix_event_organizer_id'), 'event', ['organizer_id'])

    op.create_table(
        'ticket_type',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('sold_count', sa.Integer(), nullable=False),
        sa.Column('waitlist_enabled', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('sold_count >= 0', name='ck_ticket_type_sold_count_non_negative'),
        sa.CheckConstraint(
            'capacity IS NULL OR sold_count <= capacity',
            name='ck_ticket_type_sold_count_capacity',
        ),
        sa.CheckConstraint('price >= 0', name='ck_ticket_type_price_non_negative'),
    )
    op.create_index(op.f('ix_ticket_type_event_id'), 'ticket_type', ['event_id'])

    # ========== STEP 2: Registrations and capacity ledger ==========

    # No foreign keys: cancelled registrations outlive their event
    op.create_table(
        'registration',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('ticket_type_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('idempotency_key', sa.String(length=255), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_registration_user_id'), 'registration', ['user_id'])
    op.create_index(op.f('ix_registration_event_id'), 'registration', ['event_id'])
    op.create_index(op.f('ix_registration_ticket_type_id'), 'registration', ['ticket_type_id'])
    op.create_index(
        'uq_registration_active',
        'registration',
        ['user_id', 'event_id', 'ticket_type_id'],
        unique=True,
        postgresql_where=sa.text(ACTIVE_STATUS_CLAUSE),
        sqlite_where=sa.text(ACTIVE_STATUS_CLAUSE),
    )
    op.create_index(
        'uq_registration_idempotency_key',
        'registration',
        ['user_id', 'idempotency_key'],
        unique=True,
        postgresql_where=sa.text('idempotency_key IS NOT NULL'),
        sqlite_where=sa.text('idempotency_key IS NOT NULL'),
    )
    op.create_index(
        'ix_registration_waitlist_fifo', 'registration', ['ticket_type_id', 'status', 'created_at']
    )

    op.create_table(
        'capacity_reservation',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ticket_type_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        _timestamp('created_at'),
        sa.Column('released_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['ticket_type_id'], ['ticket_type.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_capacity_reservation_ticket_type_id'), 'capacity_reservation', ['ticket_type_id']
    )

    # ========== STEP 3: Identity projection ==========

    op.create_table(
        'profile',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Drop all tables in reverse order of creation (indexes dropped automatically)."""
    op.drop_table('profile')
    op.drop_table('capacity_reservation')
    op.drop_table('registration')
    op.drop_table('ticket_type')
    op.drop_table('event')
    op.drop_table('venue')
