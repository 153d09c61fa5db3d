"""006: create rounds table

Revision ID: 006
Revises: 005
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE rounds (
            id          BIGINT      PRIMARY KEY,
            phase       VARCHAR(10) NOT NULL,
            bid_time    BIGINT      NOT NULL,
            open_time   BIGINT      NOT NULL,
            close_time  BIGINT      NOT NULL,
            open_price  BIGINT,
            close_price BIGINT,
            winner      VARCHAR(4),
            bull_amount BIGINT      NOT NULL DEFAULT 0,
            bear_amount BIGINT      NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_rounds_phase  CHECK (phase IN ('BIDDING', 'LIVE', 'FINISHED')),
            CONSTRAINT ck_rounds_winner CHECK (winner IS NULL OR winner IN ('BULL', 'BEAR')),
            CONSTRAINT ck_rounds_pools  CHECK (bull_amount >= 0 AND bear_amount >= 0),
            CONSTRAINT ck_rounds_times  CHECK (close_time >= open_time),
            CONSTRAINT ck_rounds_prices CHECK (
                (phase = 'BIDDING' AND open_price IS NULL AND close_price IS NULL)
                OR (phase = 'LIVE' AND open_price IS NOT NULL AND close_price IS NULL)
                OR (phase = 'FINISHED' AND open_price IS NOT NULL AND close_price IS NOT NULL)
            )
        );
    """)
    # At most one Bidding and one Live round at any time
    op.execute("CREATE UNIQUE INDEX uq_rounds_one_bidding ON rounds (phase) WHERE phase = 'BIDDING';")
    op.execute("CREATE UNIQUE INDEX uq_rounds_one_live ON rounds (phase) WHERE phase = 'LIVE';")
    op.execute("""
        CREATE TRIGGER trg_rounds_updated_at
            BEFORE UPDATE ON rounds
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TRIGGER trg_rounds_freeze_finished
            BEFORE UPDATE ON rounds
            FOR EACH ROW EXECUTE FUNCTION fn_freeze_finished_round();
    """)

def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS rounds CASCADE;")
