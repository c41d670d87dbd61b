"""Daily assignment marker — one row per (user, day) so concurrent first calls cannot both assign.

Revision ID: 002_daily_assignments
Revises: 001_initial
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002_daily_assignments"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "daily_assignments",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("assigned_date", sa.Date, primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    # Days assigned before this revision already own their status rows
    op.execute(
        "INSERT INTO daily_assignments (user_id, assigned_date) "
        "SELECT DISTINCT user_id, assigned_date FROM user_quest_status"
    )


def downgrade() -> None:
    op.drop_table("daily_assignments")
