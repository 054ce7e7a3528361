"""initial_schema

Revision ID: 3f9c2a71d4b8
Revises:
Create Date: 2026-10-19 10:12:03.418205

Users, units (with tags and cached AI overviews), reviews, review reactions,
notifications and SETU results.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a71d4b8'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('profile_img', sa.String(length=512), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=True),
        sa.Column('is_google_user', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('google_id', sa.String(length=255), nullable=True),
        sa.Column('admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verification_token', sa.String(length=255), nullable=True),
        sa.Column('verification_token_expires', sa.DateTime(), nullable=True),
        sa.Column('reset_password_token', sa.String(length=255), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(), nullable=True),
        sa.Column('reset_password_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_reset_password_request', sa.DateTime(), nullable=True),
        sa.Column('date_joined', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('idx_users_username', 'users', ['username'], unique=True)
    op.create_index('idx_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'units',
        sa.Column('unit_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('unit_code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('avg_overall_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('avg_relevancy_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('avg_faculty_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('avg_content_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('unit_id'),
    )
    op.create_index('idx_units_unit_code', 'units', ['unit_code'], unique=True)

    op.create_table(
        'unit_tags',
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('tag', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('unit_id', 'tag'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.unit_id'], name='fk_unit_tags_unit_id', ondelete='CASCADE'),
    )
    op.create_index('idx_unit_tags_tag', 'unit_tags', ['tag'])

    op.create_table(
        'unit_overviews',
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('generated_at', sa.DateTime(), nullable=False),
        sa.Column('model', sa.String(length=100), nullable=False),
        sa.Column('total_reviews_considered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('review_sample_size', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('seasons', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('unit_id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.unit_id'], name='fk_unit_overviews_unit_id', ondelete='CASCADE'),
    )

    op.create_table(
        'reviews',
        sa.Column('review_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('semester', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('grade', sa.Integer(), nullable=True),
        sa.Column('overall_rating', sa.Float(), nullable=False),
        sa.Column('relevancy_rating', sa.Float(), nullable=False),
        sa.Column('faculty_rating', sa.Float(), nullable=False),
        sa.Column('content_rating', sa.Float(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('likes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('dislikes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('review_id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.unit_id'], name='fk_reviews_unit_id', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_reviews_user_id', ondelete='CASCADE'),
    )
    op.create_index('idx_reviews_user_unit', 'reviews', ['user_id', 'unit_id'], unique=True)
    op.create_index('idx_reviews_unit_id', 'reviews', ['unit_id'])
    op.create_index('idx_reviews_created_at', 'reviews', ['created_at'])

    op.create_table(
        'review_reactions',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('review_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id', 'review_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_review_reactions_user_id', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.review_id'], name='fk_review_reactions_review_id', ondelete='CASCADE'),
    )
    op.create_index('idx_review_reactions_review_kind', 'review_reactions', ['review_id', 'kind'])

    op.create_table(
        'notifications',
        sa.Column('notification_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('actor_username', sa.String(length=64), nullable=False),
        sa.Column('actor_avatar', sa.String(length=512), nullable=True),
        sa.Column('navigate_to', sa.String(length=255), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('review_id', sa.Integer(), nullable=True),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('notification_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_notifications_user_id', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.review_id'], name='fk_notifications_review_id', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['users.user_id'], name='fk_notifications_actor_id', ondelete='SET NULL'),
    )
    op.create_index(
        'idx_notifications_like_relationship',
        'notifications',
        ['user_id', 'review_id', 'actor_id', 'kind'],
        unique=True,
    )
    op.create_index('idx_notifications_actor_id', 'notifications', ['actor_id'])

    op.create_table(
        'setus',
        sa.Column('setu_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('unit_code', sa.String(length=20), nullable=False),
        sa.Column('unit_name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=100), nullable=False),
        sa.Column('season', sa.String(length=20), nullable=False),
        sa.Column('responses', sa.Integer(), nullable=False),
        sa.Column('invited', sa.Integer(), nullable=False),
        sa.Column('response_rate', sa.Float(), nullable=True),
        sa.Column('level', sa.Integer(), nullable=True),
        sa.Column('agg_mean', sa.Float(), nullable=True),
        sa.Column('agg_median', sa.Float(), nullable=True),
        sa.Column('metrics', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('setu_id'),
    )
    op.create_index('idx_setus_unit_season_code', 'setus', ['unit_code', 'season', 'code'], unique=True)
    op.create_index('idx_setus_season', 'setus', ['season'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_setus_season', table_name='setus')
    op.drop_index('idx_setus_unit_season_code', table_name='setus')
    op.drop_table('setus')

    op.drop_index('idx_notifications_actor_id', table_name='notifications')
    op.drop_index('idx_notifications_like_relationship', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('idx_review_reactions_review_kind', table_name='review_reactions')
    op.drop_table('review_reactions')

    op.drop_index('idx_reviews_created_at', table_name='reviews')
    op.drop_index('idx_reviews_unit_id', table_name='reviews')
    op.drop_index('idx_reviews_user_unit', table_name='reviews')
    op.drop_table('reviews')

    op.drop_table('unit_overviews')

    op.drop_index('idx_unit_tags_tag', table_name='unit_tags')
    op.drop_table('unit_tags')

    op.drop_index('idx_units_unit_code', table_name='units')
    op.drop_table('units')

    op.drop_index('idx_users_email', table_name='users')
    op.drop_index('idx_users_username', table_name='users')
    op.drop_table('users')
