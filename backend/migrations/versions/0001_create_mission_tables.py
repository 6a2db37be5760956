"""create ninjas, missions, assignments

Revision ID: 0001_mission_tables
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_mission_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ninjas',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('rank', sa.String(length=16), nullable=False, server_default='Academy'),
        sa.Column('experience_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('avatar_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )

    op.create_table(
        'missions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('rank_requirement', sa.String(length=4), nullable=False),
        sa.Column('reward', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Open'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('reward > 0', name='ck_missions_reward_positive'),
    )
    op.create_index('ix_missions_created', 'missions', ['created_at', 'id'])
    op.create_index('ix_missions_rank_status', 'missions', ['rank_requirement', 'status'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('mission_id', sa.Integer(), sa.ForeignKey('missions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ninja_id', sa.Integer(), sa.ForeignKey('ninjas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('report_text', sa.Text(), nullable=True),
        sa.Column('evidence_image_url', sa.String(length=1024), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('mission_id'),
    )
    op.create_index('ix_assignments_ninja_id', 'assignments', ['ninja_id'])


def downgrade() -> None:
    op.drop_index('ix_assignments_ninja_id', table_name='assignments')
    op.drop_table('assignments')
    op.drop_index('ix_missions_rank_status', table_name='missions')
    op.drop_index('ix_missions_created', table_name='missions')
    op.drop_table('missions')
    op.drop_table('ninjas')
