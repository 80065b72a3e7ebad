"""002: create game_participants table

Revision ID: 002
Revises: 001
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE game_participants (
            id                  VARCHAR(64)     PRIMARY KEY,
            game_id             VARCHAR(64)     NOT NULL REFERENCES games (id),
            user_id             VARCHAR(64)     NOT NULL,
            spent_budget        BIGINT          NOT NULL DEFAULT 0,
            team                JSONB           NOT NULL DEFAULT '[]'::jsonb,
            roster_size         INT             NOT NULL DEFAULT 0,
            roster_complete     BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_participants_game_user UNIQUE (game_id, user_id),
            CONSTRAINT ck_participants_spent_gte_0  CHECK (spent_budget >= 0),
            CONSTRAINT ck_participants_roster_gte_0 CHECK (roster_size >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_participants_game ON game_participants (game_id);")
    op.execute("""
        CREATE TRIGGER trg_participants_updated_at
            BEFORE UPDATE ON game_participants
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS game_participants CASCADE;")
