"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table('flights',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('flight_number', sa.String(length=32), nullable=False),
        sa.Column('airline', sa.String(length=120), nullable=False),
        sa.Column('aircraft', sa.String(length=120), nullable=True),
        sa.Column('origin', sa.String(length=64), nullable=False),
        sa.Column('destination', sa.String(length=64), nullable=False),
        sa.Column('departure', sa.DateTime(), nullable=False),
        sa.Column('arrival', sa.DateTime(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('seats_total', sa.Integer(), nullable=False),
        sa.Column('seats_available', sa.Integer(), nullable=False),
        sa.Column('stops', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('flight_number'),
        sa.CheckConstraint('seats_available >= 0', name='ck_flights_seats_non_negative'),
        sa.CheckConstraint('seats_available <= seats_total', name='ck_flights_seats_within_capacity'),
    )
    op.create_index('ix_flights_flight_number', 'flights', ['flight_number'])
    op.create_index('ix_flights_origin', 'flights', ['origin'])
    op.create_index('ix_flights_destination', 'flights', ['destination'])

    op.create_table('fare_options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('flight_id', sa.Integer(), sa.ForeignKey('flights.id', ondelete='CASCADE'), nullable=False),
        sa.Column('seat_class', sa.String(length=32), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('seats_available', sa.Integer(), nullable=False),
        sa.Column('perks', sa.JSON(), nullable=True),
        sa.UniqueConstraint('flight_id', 'seat_class', name='uq_fare_option_class'),
        sa.CheckConstraint('seats_available >= 0', name='ck_fare_seats_non_negative'),
        sa.CheckConstraint('seats_available <= capacity', name='ck_fare_seats_within_capacity'),
    )
    op.create_index('ix_fare_options_flight_id', 'fare_options', ['flight_id'])

    op.create_table('bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('flight_id', sa.Integer(), sa.ForeignKey('flights.id'), nullable=False),
        sa.Column('seat_class', sa.String(length=32), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('booking_time', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
    op.create_index('ix_bookings_flight_id', 'bookings', ['flight_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_payment_status', 'bookings', ['payment_status'])

    op.create_table('tickets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('flight_id', sa.Integer(), sa.ForeignKey('flights.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('seat_class', sa.String(length=32), nullable=True),
        sa.Column('seat_number', sa.String(length=8), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='unused'),
        sa.Column('passenger_name', sa.String(length=255), nullable=False),
        sa.Column('passenger_email', sa.String(length=255), nullable=False),
        sa.Column('passenger_phone', sa.String(length=32), nullable=False),
        sa.Column('passenger_date_of_birth', sa.Date(), nullable=False),
        sa.Column('passenger_gender', sa.String(length=16), nullable=False),
        sa.Column('passenger_nationality', sa.String(length=64), nullable=False),
        sa.Column('passenger_passport_number', sa.String(length=64), nullable=True),
        sa.Column('passenger_id_number', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_tickets_booking_id', 'tickets', ['booking_id'])
    op.create_index('ix_tickets_flight_id', 'tickets', ['flight_id'])
    op.create_index('ix_tickets_user_id', 'tickets', ['user_id'])
    op.create_index('ix_tickets_status', 'tickets', ['status'])
    op.create_index('ix_tickets_passenger_email', 'tickets', ['passenger_email'])
    op.create_index('ix_tickets_passenger_passport_number', 'tickets', ['passenger_passport_number'])
    op.create_index(
        'uq_tickets_active_seat', 'tickets', ['flight_id', 'seat_number'], unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    op.create_table('payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('method', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('transaction_id', sa.String(length=64), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_payments_booking_id', 'payments', ['booking_id'])
    op.create_index('ix_payments_user_id', 'payments', ['user_id'])

def downgrade():
    op.drop_table('payments')
    op.drop_index('uq_tickets_active_seat', table_name='tickets')
    op.drop_table('tickets')
    op.drop_table('bookings')
    op.drop_table('fare_options')
    op.drop_table('flights')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
