"""Add strava_connections and activities tables

Revision ID: 001_strava_connections_and_activities
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_strava_connections_and_activities'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One credential per user; upserts conflict on user_id
    op.create_table(
        'strava_connections',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), unique=True, nullable=False),
        sa.Column('strava_athlete_id', sa.BigInteger(), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # Upserts conflict on strava_id (global, not scoped per user)
    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('strava_id', sa.BigInteger(), unique=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('distance', sa.Float(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('moving_time', sa.Integer(), nullable=True),
        sa.Column('elapsed_time', sa.Integer(), nullable=True),
        sa.Column('elevation_gain', sa.Float(), nullable=True),
        sa.Column('average_heartrate', sa.Float(), nullable=True),
        sa.Column('average_pace', sa.Float(), nullable=True),
        sa.Column('source', sa.String(20), nullable=False),
        sa.Column('synced_at', sa.DateTime(), nullable=True),
    )

    op.create_index('ix_activities_user_id', 'activities', ['user_id'])
    op.create_index('ix_activities_started_at', 'activities', ['started_at'])


def downgrade() -> None:
    op.drop_index('ix_activities_started_at', 'activities')
    op.drop_index('ix_activities_user_id', 'activities')
    op.drop_table('activities')
    op.drop_table('strava_connections')
