"""wenjuan_answers: add respondent user_id

Revision ID: 0002b3c4d5e6
Revises: 0001a2b3c4d5
Create Date: 2026-10-19 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0002b3c4d5e6'
down_revision: Union[str, None] = '0001a2b3c4d5'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('wenjuan_answers', sa.Column('user_id', sa.Integer(), nullable=True))
    op.create_foreign_key(
        'fk_wenjuan_answers_user_id', 'wenjuan_answers', 'users', ['user_id'], ['id'],
    )
    op.create_index('ix_wenjuan_answers_user_id', 'wenjuan_answers', ['user_id'])

    # 既存回答はメールが一致する未削除ユーザーに紐付ける。一致しなければ NULL のまま
    op.execute(
        """
        UPDATE wenjuan_answers SET user_id = (
            SELECT users.id FROM users
            WHERE users.email = wenjuan_answers.user_email AND users.deleted_at IS NULL
        )
        """
    )


def downgrade() -> None:
    op.drop_index('ix_wenjuan_answers_user_id', table_name='wenjuan_answers')
    op.drop_constraint('fk_wenjuan_answers_user_id', 'wenjuan_answers', type_='foreignkey')
    op.drop_column('wenjuan_answers', 'user_id')
