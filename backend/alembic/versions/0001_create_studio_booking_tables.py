"""create studio booking tables

Revision ID: 0001_studio_booking
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '0001_studio_booking'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOKING_STATUSES = ('pending', 'confirmed', 'cancelled', 'completed')
PAYMENT_STATUSES = ('pending', 'partial', 'paid', 'refunded')
USER_ROLES = ('client', 'staff', 'manager', 'admin')


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLES, name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'studios',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('studio_id', sa.Integer(), sa.ForeignKey('studios.id'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_rooms_studio_id', 'rooms', ['studio_id'])

    op.create_table(
        'staff_assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('studio_id', sa.Integer(), sa.ForeignKey('studios.id'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', name='uq_staff_assignments_user'),
    )
    op.create_index('ix_staff_assignments_studio_id', 'staff_assignments', ['studio_id'])

    op.create_table(
        'equipment',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('daily_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('studio_id', sa.Integer(), sa.ForeignKey('studios.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_equipment_studio_id', 'equipment', ['studio_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.Integer(), sa.ForeignKey('rooms.id'), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='bookingstatus'), nullable=False),
        sa.Column('payment_status', sa.Enum(*PAYMENT_STATUSES, name='paymentstatus'), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('end_time > start_time', name='ck_bookings_interval'),
        sa.CheckConstraint('total_price >= 0', name='ck_bookings_total_price'),
    )
    op.create_index('ix_bookings_room_id', 'bookings', ['room_id'])
    op.create_index('ix_bookings_owner_id', 'bookings', ['owner_id'])
    op.create_index('ix_bookings_start_time', 'bookings', ['start_time'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])

    op.create_table(
        'booking_equipment',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('equipment_id', sa.Integer(), sa.ForeignKey('equipment.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.UniqueConstraint('booking_id', 'equipment_id', name='uq_booking_equipment_item'),
    )
    op.create_index('ix_booking_equipment_booking_id', 'booking_equipment', ['booking_id'])

    if bind.dialect.name == 'postgresql':
        # Database-level guard against double booking. Closed ranges match the
        # default inclusive conflict rule; deployments that enable
        # BOOKING_ALLOW_BACK_TO_BACK rebuild this with '[)'.
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE bookings
            ADD CONSTRAINT ex_bookings_room_active_interval
            EXCLUDE USING gist (
                room_id WITH =,
                tsrange(start_time, end_time, '[]') WITH &&
            )
            WHERE (status IN ('pending', 'confirmed'))
            """
        )


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_room_active_interval")
    op.drop_table('booking_equipment')
    op.drop_table('bookings')
    op.drop_table('equipment')
    op.drop_table('staff_assignments')
    op.drop_table('rooms')
    op.drop_table('studios')
    op.drop_table('users')
    if bind.dialect.name == 'postgresql':
        for enum_name in ('bookingstatus', 'paymentstatus', 'userrole'):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
