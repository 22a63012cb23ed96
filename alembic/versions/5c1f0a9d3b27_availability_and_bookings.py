"""availability and bookings

Revision ID: 5c1f0a9d3b27
Revises:
Create Date: 2026-10-19 09:12:44.318201

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1f0a9d3b27'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    is_postgres = op.get_bind().dialect.name == "postgresql"

    # 1. Cleaners
    op.create_table(
        'cleaners',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False, unique=True),
        sa.Column('business_name', sa.String(200), nullable=False),
        sa.Column('business_email', sa.String(255), nullable=True),
        sa.Column('instant_booking', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('approval_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_cleaners_user_id', 'cleaners', ['user_id'])

    # 2. Weekly availability rules
    op.create_table(
        'cleaner_availability',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('cleaner_id', sa.Uuid(), sa.ForeignKey('cleaners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='ck_availability_day_of_week'),
        sa.CheckConstraint('start_time < end_time', name='ck_availability_time_order'),
    )
    op.create_index('ix_cleaner_availability_cleaner_id', 'cleaner_availability', ['cleaner_id'])

    # 3. Blocked dates
    op.create_table(
        'cleaner_blocked_dates',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('cleaner_id', sa.Uuid(), sa.ForeignKey('cleaners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('blocked_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('cleaner_id', 'blocked_date', name='uq_blocked_date_per_cleaner'),
    )
    op.create_index('ix_cleaner_blocked_dates_cleaner_id', 'cleaner_blocked_dates', ['cleaner_id'])

    # 4. Bookings
    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('cleaner_id', sa.Uuid(), sa.ForeignKey('cleaners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('estimated_hours', sa.Float(), nullable=False),
        sa.Column('service_type', sa.String(100), nullable=True),
        sa.Column('property_type', sa.String(100), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('estimated_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('start_time < end_time', name='ck_booking_time_order'),
        sa.CheckConstraint('estimated_hours > 0', name='ck_booking_estimated_hours'),
    )
    op.create_index('ix_bookings_customer_id', 'bookings', ['customer_id'])
    op.create_index('ix_bookings_cleaner_date_status', 'bookings', ['cleaner_id', 'booking_date', 'status'])

    # 5. No two confirmed bookings of one cleaner may overlap
    if is_postgres:
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute("""
            ALTER TABLE bookings
              ADD CONSTRAINT bookings_no_overlap_per_cleaner
              EXCLUDE USING gist (
                cleaner_id WITH =,
                tsrange(booking_date + start_time, booking_date + end_time, '[)') WITH &&
              )
              WHERE (status = 'confirmed')
        """)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('bookings')
    op.drop_table('cleaner_blocked_dates')
    op.drop_table('cleaner_availability')
    op.drop_index('ix_cleaners_user_id', table_name='cleaners')
    op.drop_table('cleaners')
