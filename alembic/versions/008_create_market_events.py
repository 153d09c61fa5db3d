"""008: create market_events table

Revision ID: 008
Revises: 007
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_events (
            id              BIGSERIAL   PRIMARY KEY,
            event_type      VARCHAR(30) NOT NULL,
            round_id        BIGINT,
            payload         JSONB       NOT NULL,
            created_at_ts   BIGINT      NOT NULL,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_event_type CHECK (
                event_type IN (
                    'BET_PLACED',
                    'ROUND_CLOSED', 'ROUND_OPENED', 'ROUND_CREATED',
                    'WINNINGS_COLLECTED',
                    'CONFIG_UPDATED', 'MARKET_PAUSED', 'MARKET_RESUMED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_market_events_round ON market_events (round_id, id);")
    op.execute("CREATE INDEX idx_market_events_player ON market_events USING GIN ((payload->'player_id'));")
    op.execute("COMMENT ON TABLE market_events IS 'Append-only audit trail of market commands';")

def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_events CASCADE;")
