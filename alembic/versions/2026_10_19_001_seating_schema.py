"""Restaurant tables and table bookings

Revision ID: 001_seating_schema
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_seating_schema'
down_revision = None

TABLE_STATUSES = ('AVAILABLE', 'OCCUPIED', 'RESERVED', 'OUT_OF_ORDER')
BOOKING_STATUSES = ('WAITING', 'SEATED', 'COMPLETED', 'CANCELLED')


def upgrade():
    # Create restaurant_tables table
    op.create_table(
        'restaurant_tables',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('table_number', sa.Integer(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('location_description', sa.String(255), nullable=True),
        sa.Column('status', sa.Enum(*TABLE_STATUSES, name='tablestatus'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('capacity >= 1', name='ck_restaurant_tables_capacity'),
    )
    op.create_index('ix_restaurant_tables_table_number', 'restaurant_tables', ['table_number'], unique=True)
    op.create_index('ix_restaurant_tables_status', 'restaurant_tables', ['status'])

    # Create table_bookings table
    op.create_table(
        'table_bookings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_phone', sa.String(50), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('booking_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('special_requests', sa.String(1000), nullable=True),
        sa.Column('table_id', sa.Integer(), sa.ForeignKey('restaurant_tables.id'), nullable=True),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='bookingstatus'), nullable=False),
        sa.Column('estimated_wait_time', sa.Integer(), nullable=True),
        sa.Column('actual_seat_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('checkout_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('party_size >= 1', name='ck_table_bookings_party_size'),
    )
    op.create_index('ix_table_bookings_customer_phone', 'table_bookings', ['customer_phone'])
    op.create_index('ix_table_bookings_booking_time', 'table_bookings', ['booking_time'])
    op.create_index('ix_table_bookings_table_id', 'table_bookings', ['table_id'])
    op.create_index('ix_table_bookings_status', 'table_bookings', ['status'])


def downgrade():
    # Drop indexes
    op.drop_index('ix_table_bookings_status', 'table_bookings')
    op.drop_index('ix_table_bookings_table_id', 'table_bookings')
    op.drop_index('ix_table_bookings_booking_time', 'table_bookings')
    op.drop_index('ix_table_bookings_customer_phone', 'table_bookings')
    op.drop_index('ix_restaurant_tables_status', 'restaurant_tables')
    op.drop_index('ix_restaurant_tables_table_number', 'restaurant_tables')

    # Drop tables, bookings first because of the foreign key
    op.drop_table('table_bookings')
    op.drop_table('restaurant_tables')

    sa.Enum(name='bookingstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='tablestatus').drop(op.get_bind(), checkfirst=True)
