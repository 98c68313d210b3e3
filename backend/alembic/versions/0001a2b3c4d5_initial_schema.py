"""initial schema: users, blogs, tasks, wenjuans, answers, categories

Revision ID: 0001a2b3c4d5
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0001a2b3c4d5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(soft_delete: bool = True) -> list:
    cols = [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]
    if soft_delete:
        cols.append(sa.Column('deleted_at', sa.DateTime(), nullable=True))
    return cols


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('role', sa.Enum('user', 'admin', name='user_role'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'])

    op.create_table(
        'blogs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('tags', sa.String(length=200), nullable=True),
        sa.Column('status', sa.Enum('draft', 'published', name='blog_status'), nullable=False),
        sa.Column('likes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blogs_user_id', 'blogs', ['user_id'])
    op.create_index('ix_blogs_deleted_at', 'blogs', ['deleted_at'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('priority', sa.Enum('high', 'medium', 'low', name='task_priority'), nullable=False),
        sa.Column('status', sa.Enum('pending', 'in_progress', 'completed', name='task_status'), nullable=False),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tasks_creator_id', 'tasks', ['creator_id'])
    op.create_index('ix_tasks_deleted_at', 'tasks', ['deleted_at'])

    op.create_table(
        'wenjuans',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum('draft', 'published', name='wenjuan_status'), nullable=False),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('is_pinned', sa.Boolean(), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_wenjuans_creator_id', 'wenjuans', ['creator_id'])
    op.create_index('ix_wenjuans_deleted_at', 'wenjuans', ['deleted_at'])

    op.create_table(
        'wenjuan_answers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('wenjuan_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=100), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['wenjuan_id'], ['wenjuans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_wenjuan_answers_wenjuan_id', 'wenjuan_answers', ['wenjuan_id'])
    op.create_index('ix_wenjuan_answers_deleted_at', 'wenjuan_answers', ['deleted_at'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_categories_deleted_at', 'categories', ['deleted_at'])

    op.create_table(
        'wenjuan_categories',
        sa.Column('wenjuan_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['wenjuan_id'], ['wenjuans.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('wenjuan_id', 'category_id'),
    )


def downgrade() -> None:
    op.drop_table('wenjuan_categories')
    op.drop_index('ix_categories_deleted_at', table_name='categories')
    op.drop_table('categories')
    op.drop_index('ix_wenjuan_answers_deleted_at', table_name='wenjuan_answers')
    op.drop_index('ix_wenjuan_answers_wenjuan_id', table_name='wenjuan_answers')
    op.drop_table('wenjuan_answers')
    op.drop_index('ix_wenjuans_deleted_at', table_name='wenjuans')
    op.drop_index('ix_wenjuans_creator_id', table_name='wenjuans')
    op.drop_table('wenjuans')
    op.drop_index('ix_tasks_deleted_at', table_name='tasks')
    op.drop_index('ix_tasks_creator_id', table_name='tasks')
    op.drop_table('tasks')
    op.drop_index('ix_blogs_deleted_at', table_name='blogs')
    op.drop_index('ix_blogs_user_id', table_name='blogs')
    op.drop_table('blogs')
    op.drop_index('ix_users_deleted_at', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
