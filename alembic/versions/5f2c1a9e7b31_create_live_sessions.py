"""create_live_sessions

Revision ID: 5f2c1a9e7b31
Revises:
Create Date: 2026-10-18 10:12:44.318204

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '5f2c1a9e7b31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False, server_default=''),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_is_active'), 'users', ['is_active'], unique=False)

    op.create_table(
        'live_sessions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('tutor_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('learner_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('actual_start_time', sa.DateTime(), nullable=True),
        sa.Column('actual_end_time', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('tutor_id <> learner_id', name='ck_live_sessions_distinct_parties'),
        sa.CheckConstraint(
            "status IN ('scheduled', 'in_progress', 'completed')",
            name='ck_live_sessions_status',
        ),
    )
    op.create_index(op.f('ix_live_sessions_tutor_id'), 'live_sessions', ['tutor_id'])
    op.create_index(op.f('ix_live_sessions_learner_id'), 'live_sessions', ['learner_id'])
    op.create_index(op.f('ix_live_sessions_scheduled_at'), 'live_sessions', ['scheduled_at'])
    op.create_index(op.f('ix_live_sessions_status'), 'live_sessions', ['status'])

    op.create_table(
        'live_session_audit_logs',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('session_id', sa.String(64), sa.ForeignKey('live_sessions.id'), nullable=False),
        sa.Column('changed_by', sa.String(36), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('to_status', sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_live_session_audit_logs_session_id'),
        'live_session_audit_logs',
        ['session_id'],
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_live_session_audit_logs_session_id'), table_name='live_session_audit_logs')
    op.drop_table('live_session_audit_logs')
    op.drop_index(op.f('ix_live_sessions_status'), table_name='live_sessions')
    op.drop_index(op.f('ix_live_sessions_scheduled_at'), table_name='live_sessions')
    op.drop_index(op.f('ix_live_sessions_learner_id'), table_name='live_sessions')
    op.drop_index(op.f('ix_live_sessions_tutor_id'), table_name='live_sessions')
    op.drop_table('live_sessions')
    op.drop_index(op.f('ix_users_is_active'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
