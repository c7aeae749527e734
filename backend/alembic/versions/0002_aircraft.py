"""aircraft seat layouts

Revision ID: 0002_aircraft
Revises: 0001_initial
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_aircraft'
down_revision = '0001_initial'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('aircrafts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('aircraft_code', sa.String(length=32), nullable=False),
        sa.Column('model', sa.String(length=120), nullable=False),
        sa.Column('manufacturer', sa.String(length=120), nullable=False),
        sa.Column('seat_configuration', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('aircraft_code'),
    )
    op.create_index('ix_aircrafts_aircraft_code', 'aircrafts', ['aircraft_code'])

    with op.batch_alter_table('flights') as batch:
        batch.add_column(sa.Column('aircraft_id', sa.Integer(), nullable=True))
        batch.create_foreign_key('fk_flights_aircraft_id', 'aircrafts', ['aircraft_id'], ['id'])
        batch.create_index('ix_flights_aircraft_id', ['aircraft_id'])

def downgrade():
    with op.batch_alter_table('flights') as batch:
        batch.drop_index('ix_flights_aircraft_id')
        batch.drop_constraint('fk_flights_aircraft_id', type_='foreignkey')
        batch.drop_column('aircraft_id')
    op.drop_index('ix_aircrafts_aircraft_code', table_name='aircrafts')
    op.drop_table('aircrafts')
