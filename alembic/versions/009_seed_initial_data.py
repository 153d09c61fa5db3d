"""009: seed initial data

Revision ID: 009
Revises: 008
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

from config.settings import settings

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Custody account: holds every stake until it is paid out
    op.execute("""
        INSERT INTO accounts (user_id, balance, version)
        VALUES ('PREDICTION_POOL', 0, 0);
    """)
    # No rounds yet: the first AdvanceRound creates round 0
    op.execute(f"""
        INSERT INTO market_state (id, round_seconds, minimum_bet, fee_bps)
        VALUES (1, {int(settings.DEFAULT_ROUND_SECONDS)},
                {int(settings.DEFAULT_MINIMUM_BET)},
                {int(settings.DEFAULT_FEE_BPS)});
    """)

def downgrade() -> None:
    op.execute("DELETE FROM market_state WHERE id = 1;")
    op.execute("DELETE FROM accounts WHERE user_id = 'PREDICTION_POOL';")
