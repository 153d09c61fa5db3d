"""005: create market_state table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Singleton row (id = 1); SELECT ... FOR UPDATE on it serialises every command
    op.execute("""
        CREATE TABLE market_state (
            id              SMALLINT    PRIMARY KEY DEFAULT 1,
            round_seconds   BIGINT      NOT NULL,
            minimum_bet     BIGINT      NOT NULL,
            fee_bps         INTEGER     NOT NULL,
            is_paused       BOOLEAN     NOT NULL DEFAULT FALSE,
            next_round_id   BIGINT      NOT NULL DEFAULT 0,
            accumulated_fee BIGINT      NOT NULL DEFAULT 0,
            total_volume    BIGINT      NOT NULL DEFAULT 0,
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_state_singleton     CHECK (id = 1),
            CONSTRAINT ck_market_state_round_seconds CHECK (round_seconds > 0),
            CONSTRAINT ck_market_state_minimum_bet   CHECK (minimum_bet >= 1),
            CONSTRAINT ck_market_state_fee_bps       CHECK (fee_bps BETWEEN 0 AND 10000),
            CONSTRAINT ck_market_state_counters      CHECK (
                next_round_id >= 0 AND accumulated_fee >= 0 AND total_volume >= 0
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_market_state_updated_at
            BEFORE UPDATE ON market_state
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_state CASCADE;")
