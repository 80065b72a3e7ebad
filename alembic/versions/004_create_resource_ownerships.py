"""004: create resource_ownerships table

Revision ID: 004
Revises: 003
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE resource_ownerships (
            id                  VARCHAR(64)     PRIMARY KEY,
            game_id             VARCHAR(64)     NOT NULL REFERENCES games (id),
            participant_id      VARCHAR(64)     NOT NULL REFERENCES game_participants (id),
            resource_id         VARCHAR(128)    NOT NULL,
            price_paid          BIGINT          NOT NULL DEFAULT 0,
            acquired_at         TIMESTAMPTZ     NOT NULL,
            acquisition_type    VARCHAR(20)     NOT NULL,
            active              BOOLEAN         NOT NULL DEFAULT TRUE,
            benched             BOOLEAN         NOT NULL DEFAULT FALSE,
            points_scored       INT             NOT NULL DEFAULT 0,
            stages_participated INT             NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_ownership_triple UNIQUE (game_id, participant_id, resource_id),
            CONSTRAINT ck_ownership_acquisition_type CHECK (
                acquisition_type IN ('auction', 'selection')
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_ownership_participant_active "
        "ON resource_ownerships (game_id, participant_id) WHERE active;"
    )
    op.execute("""
        CREATE TRIGGER trg_ownership_updated_at
            BEFORE UPDATE ON resource_ownerships
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS resource_ownerships CASCADE;")
