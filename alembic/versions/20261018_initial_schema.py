"""Initial scheduling schema

Revision ID: 3f7a9c1d2e4b
Revises:
Create Date: 2026-10-18

Creates the tables used by the scheduling engine:
- users, locations
- activities
- user_activity_preferences and their default participant rosters
- scheduled_activities (occurrences) and activity_participants
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f7a9c1d2e4b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list:
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('locations',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('users',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('location_id', sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('idx_users_email', ['email'], unique=False)

    op.create_table('activities',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('emoji', sa.String(length=10), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('estimated_time', sa.Interval(), nullable=False),
        sa.Column('location_id', sa.Integer(), nullable=True),
        sa.Column('user_created', sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('user_activity_preferences',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('activity_id', sa.Integer(), nullable=False),
        sa.Column('frequency', sa.Integer(), nullable=False),
        sa.Column('frequency_period', sa.String(length=50), nullable=False),
        sa.Column('days_of_week', sa.String(length=50), nullable=False),
        *_audit_columns(),
        sa.CheckConstraint('frequency >= 1', name='ck_preference_frequency_positive'),
        sa.CheckConstraint("frequency_period IN ('week', 'month')",
                           name='ck_preference_frequency_period'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['activity_id'], ['activities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('user_activity_preferences', schema=None) as batch_op:
        batch_op.create_index('idx_user_activity_preferences_user_id', ['user_id'], unique=False)
        batch_op.create_index('idx_user_activity_preferences_activity_id', ['activity_id'], unique=False)

    op.create_table('user_activity_preferences_participants',
        sa.Column('user_activity_preference_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['user_activity_preference_id'], ['user_activity_preferences.id'],
                                ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_activity_preference_id', 'user_id',
                            name='uq_user_activity_preference_user')
    )
    with op.batch_alter_table('user_activity_preferences_participants', schema=None) as batch_op:
        batch_op.create_index('idx_preference_participants_preference_id',
                              ['user_activity_preference_id'], unique=False)
        batch_op.create_index('idx_preference_participants_user_id', ['user_id'], unique=False)

    op.create_table('scheduled_activities',
        sa.Column('activity_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_activity_preference_id', sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['activity_id'], ['activities.id']),
        sa.ForeignKeyConstraint(['user_activity_preference_id'], ['user_activity_preferences.id']),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('scheduled_activities', schema=None) as batch_op:
        batch_op.create_index('idx_scheduled_activities_activity_id', ['activity_id'], unique=False)
        batch_op.create_index('idx_scheduled_activities_user_activity_preference_id',
                              ['user_activity_preference_id'], unique=False)
        batch_op.create_index('idx_scheduled_activities_scheduled_at', ['scheduled_at'], unique=False)

    op.create_table('activity_participants',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_activity_id', sa.Integer(), nullable=False),
        sa.Column('invite_status', sa.String(length=25), nullable=False),
        *_audit_columns(),
        sa.CheckConstraint("invite_status IN ('Pending', 'Accepted', 'Rejected')",
                           name='ck_activity_participant_invite_status'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['scheduled_activity_id'], ['scheduled_activities.id'],
                                ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'scheduled_activity_id', name='uq_activity_user')
    )
    with op.batch_alter_table('activity_participants', schema=None) as batch_op:
        batch_op.create_index('idx_activity_participants_user_id', ['user_id'], unique=False)
        batch_op.create_index('idx_activity_participants_scheduled_activity_id',
                              ['scheduled_activity_id'], unique=False)


def downgrade() -> None:
    op.drop_table('activity_participants')
    op.drop_table('scheduled_activities')
    op.drop_table('user_activity_preferences_participants')
    op.drop_table('user_activity_preferences')
    op.drop_table('activities')
    op.drop_table('users')
    op.drop_table('locations')
