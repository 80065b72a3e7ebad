"""003: create bids table

Revision ID: 003
Revises: 002
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bids (
            id                  VARCHAR(64)     PRIMARY KEY,
            game_id             VARCHAR(64)     NOT NULL REFERENCES games (id),
            participant_id      VARCHAR(64)     NOT NULL REFERENCES game_participants (id),
            resource_id         VARCHAR(128)    NOT NULL,
            amount              BIGINT          NOT NULL,
            placed_at           TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(30)     NOT NULL DEFAULT 'active',
            settled_at          TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount_gte_0 CHECK (amount >= 0),
            CONSTRAINT ck_bids_status CHECK (
                status IN (
                    'active', 'outbid', 'won', 'lost',
                    'cancelled_duplicate', 'cancelled_team_full', 'cancelled_over_budget'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_bids_game_status ON bids (game_id, status);")
    op.execute("CREATE INDEX idx_bids_game_participant ON bids (game_id, participant_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
