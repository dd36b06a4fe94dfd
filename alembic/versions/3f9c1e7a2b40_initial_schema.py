"""initial schema

Revision ID: 3f9c1e7a2b40
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1e7a2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create projects, feedbacks, integration configs, link states and sync failures."""
    op.create_table('projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('feedbacks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'APPROVED', 'IN_PROGRESS', 'BETA', 'COMPLETED', 'REJECTED', name='feedbackstatus'), nullable=False),
        sa.Column('category', sa.Enum('FEATURE_REQUEST', 'BUG_REPORT', 'IMPROVEMENT', 'OTHER', name='feedbackcategory'), nullable=False),
        sa.Column('vote_count', sa.Integer(), nullable=False),
        sa.Column('comment_count', sa.Integer(), nullable=False),
        sa.Column('submitter_id', sa.String(length=200), nullable=True),
        sa.Column('submitter_email', sa.String(length=320), nullable=True),
        sa.Column('mrr', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('integration_configs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('credential', sa.Text(), nullable=True),
        sa.Column('target_ref', sa.JSON(), nullable=False),
        sa.Column('target_names', sa.JSON(), nullable=False),
        sa.Column('default_tags', sa.JSON(), nullable=False),
        sa.Column('sync_status', sa.Boolean(), nullable=False),
        sa.Column('sync_comments', sa.Boolean(), nullable=False),
        sa.Column('sync_votes', sa.Boolean(), nullable=False),
        sa.Column('votes_field_ref', sa.String(length=200), nullable=True),
        sa.Column('status_field_ref', sa.String(length=200), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'provider', name='uq_project_provider')
    )
    op.create_table('link_states',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('feedback_id', sa.Integer(), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('remote_id', sa.String(length=200), nullable=False),
        sa.Column('remote_url', sa.String(length=1000), nullable=False),
        sa.Column('display_id', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['feedback_id'], ['feedbacks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('feedback_id', 'provider', name='uq_feedback_provider')
    )
    op.create_table('sync_failures',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('feedback_id', sa.Integer(), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('error_type', sa.String(length=100), nullable=False),
        sa.Column('retry_count', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'RESOLVED', 'PERMANENT', name='syncfailurestatus'), nullable=False),
        sa.Column('failed_at', sa.DateTime(), nullable=False),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['feedback_id'], ['feedbacks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    # Add index for common query patterns
    op.create_index('ix_sync_failures_status', 'sync_failures', ['status'])
    op.create_index('ix_sync_failures_feedback_provider', 'sync_failures', ['feedback_id', 'provider'])


def downgrade() -> None:
    """Drop every engine table."""
    op.drop_index('ix_sync_failures_feedback_provider', table_name='sync_failures')
    op.drop_index('ix_sync_failures_status', table_name='sync_failures')
    op.drop_table('sync_failures')
    op.drop_table('link_states')
    op.drop_table('integration_configs')
    op.drop_table('feedbacks')
    op.drop_table('projects')
