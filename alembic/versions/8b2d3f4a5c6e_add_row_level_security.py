"""add row level security

Revision ID: 8b2d3f4a5c6e
Revises: 7a1c2e3f4b5d
Create Date: 2026-06-30 07:43:39.000000

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '8b2d3f4a5c6e'
down_revision: Union[str, Sequence[str], None] = '7a1c2e3f4b5d'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Set per transaction by app.database.scope_to_owner
CURRENT_USER = "NULLIF(current_setting('app.current_user_id', true), '')::uuid"

OWNED_TABLES = {
    'profiles': 'id',
    'user_settings': 'user_id',
    'flashcard_sessions': 'user_id',
}


def upgrade() -> None:
    """Restrict every owner-scoped row to the acting user."""
    for table, owner_column in OWNED_TABLES.items():
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")
        op.execute(
            f"CREATE POLICY {table}_owner ON {table} "
            f"USING ({owner_column} = {CURRENT_USER}) "
            f"WITH CHECK ({owner_column} = {CURRENT_USER})"
        )

    # Cards are owned through their parent session
    op.execute("ALTER TABLE session_cards ENABLE ROW LEVEL SECURITY")
    op.execute("ALTER TABLE session_cards FORCE ROW LEVEL SECURITY")
    op.execute(
        "CREATE POLICY session_cards_owner ON session_cards "
        "USING (EXISTS (SELECT 1 FROM flashcard_sessions s "
        f"WHERE s.id = session_cards.session_id AND s.user_id = {CURRENT_USER})) "
        "WITH CHECK (EXISTS (SELECT 1 FROM flashcard_sessions s "
        f"WHERE s.id = session_cards.session_id AND s.user_id = {CURRENT_USER}))"
    )


def downgrade() -> None:
    op.execute("DROP POLICY IF EXISTS session_cards_owner ON session_cards")
    op.execute("ALTER TABLE session_cards DISABLE ROW LEVEL SECURITY")
    for table in OWNED_TABLES:
        op.execute(f"DROP POLICY IF EXISTS {table}_owner ON {table}")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
