"""001: create games table (+ shared updated_at trigger function)

Revision ID: 001
Revises:
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE games (
            id                  VARCHAR(64)     PRIMARY KEY,
            name                VARCHAR(200)    NOT NULL,
            game_type           VARCHAR(40)     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'registration',
            max_resources       INT             NOT NULL,
            max_budget          BIGINT,
            auction_periods     JSONB           NOT NULL DEFAULT '[]'::jsonb,
            auction_status      VARCHAR(20)     NOT NULL DEFAULT 'pending',
            version             BIGINT          NOT NULL DEFAULT 0,
            finalized_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_games_max_resources_gt_0 CHECK (max_resources > 0),
            CONSTRAINT ck_games_max_budget_gte_0   CHECK (max_budget IS NULL OR max_budget >= 0),
            CONSTRAINT ck_games_periods_is_array   CHECK (jsonb_typeof(auction_periods) = 'array'),
            CONSTRAINT ck_games_auction_status CHECK (
                auction_status IN ('pending', 'active', 'finalized')
            )
        );
    """)
    op.execute("CREATE INDEX idx_games_game_type ON games (game_type);")
    op.execute("""
        CREATE TRIGGER trg_games_updated_at
            BEFORE UPDATE ON games
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON COLUMN games.version IS "
        "'Optimistic concurrency token for auction_periods writes';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS games CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
