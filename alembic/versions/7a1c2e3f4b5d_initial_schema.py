"""initial schema

Revision ID: 7a1c2e3f4b5d
Revises:
Create Date: 2026-06-27 22:57:26.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '7a1c2e3f4b5d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create identity, profile, settings and flashcard session tables."""
    request_difficulty_enum = postgresql.ENUM(
        'beginner', 'intermediate', 'advanced',
        name='request_difficulty_enum',
        create_type=False,
    )
    card_difficulty_enum = postgresql.ENUM(
        'easy', 'medium', 'hard',
        name='card_difficulty_enum',
        create_type=False,
    )
    generation_mode_enum = postgresql.ENUM(
        'generic', 'vocabulary',
        name='generation_mode_enum',
        create_type=False,
    )
    for enum_type in (request_difficulty_enum, card_difficulty_enum, generation_mode_enum):
        enum_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'user_settings',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('openai_api_key', sa.Text(), nullable=True),
        sa.Column('gemini_api_key', sa.Text(), nullable=True),
        sa.Column('default_model', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'flashcard_sessions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('topic', sa.String(length=200), nullable=False),
        sa.Column('difficulty', request_difficulty_enum, nullable=False),
        sa.Column('mode', generation_mode_enum, nullable=False, server_default='generic'),
        sa.Column('card_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_flashcard_sessions_user_created', 'flashcard_sessions', ['user_id', 'created_at'],
    )

    op.create_table(
        'session_cards',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('session_id', sa.UUID(), nullable=False),
        sa.Column('front_text', sa.Text(), nullable=False),
        sa.Column('back_text', sa.Text(), nullable=False),
        sa.Column('additional_info', sa.Text(), nullable=False, server_default=''),
        sa.Column('difficulty', card_difficulty_enum, nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['flashcard_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_session_cards_session_id', 'session_cards', ['session_id'])


def downgrade() -> None:
    op.drop_index('ix_session_cards_session_id', table_name='session_cards')
    op.drop_table('session_cards')
    op.drop_index('ix_flashcard_sessions_user_created', table_name='flashcard_sessions')
    op.drop_table('flashcard_sessions')
    op.drop_table('user_settings')
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    for name in ('generation_mode_enum', 'card_difficulty_enum', 'request_difficulty_enum'):
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
