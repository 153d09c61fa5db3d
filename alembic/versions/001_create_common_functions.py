"""001: create shared trigger functions

fn_update_timestamp keeps updated_at current on every mutable table.
fn_freeze_finished_round makes a settled round immutable: its prices,
winner and pool totals are what every later payout is computed from.

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_freeze_finished_round()
        RETURNS TRIGGER AS $$
        BEGIN
            IF OLD.phase = 'FINISHED' THEN
                RAISE EXCEPTION 'round % is finished and cannot change', OLD.id;
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_freeze_finished_round();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
