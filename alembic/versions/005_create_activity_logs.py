"""005: create activity_logs table

Revision ID: 005
Revises: 004
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE activity_logs (
            id              BIGSERIAL       PRIMARY KEY,
            action          VARCHAR(40)     NOT NULL,
            game_id         VARCHAR(64)     NOT NULL,
            details         JSONB           NOT NULL,
            actor           VARCHAR(40)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_activity_action CHECK (
                action IN (
                    'AUCTION_FINALIZED',
                    'BIDS_REJECTED',
                    'AUCTION_PERIOD_REOPENED',
                    'AUCTION_SCHEDULE_UPDATED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_activity_game_time ON activity_logs (game_id, created_at);")
    op.execute("COMMENT ON TABLE activity_logs IS 'Append-only audit trail of finalization runs';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS activity_logs CASCADE;")
