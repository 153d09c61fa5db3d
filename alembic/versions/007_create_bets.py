"""007: create bets table

Revision ID: 007
Revises: 006
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bets (
            round_id    BIGINT      NOT NULL REFERENCES rounds (id),
            player_id   VARCHAR(64) NOT NULL,
            amount      BIGINT      NOT NULL,
            direction   VARCHAR(4)  NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_bets PRIMARY KEY (round_id, player_id),
            CONSTRAINT ck_bets_direction  CHECK (direction IN ('BULL', 'BEAR')),
            CONSTRAINT ck_bets_amount_gte_0 CHECK (amount >= 0)
        );
    """)
    # Player index: keyset scans over round_id in both directions
    op.execute("CREATE INDEX idx_bets_player_round ON bets (player_id, round_id);")

def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bets CASCADE;")
