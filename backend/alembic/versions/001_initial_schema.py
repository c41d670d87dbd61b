"""Initial schema — users, quests, quest_proofs, quest_proof_beliefs, user_quest_status.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "quests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("complexity", sa.String(10), nullable=False, server_default="easy"),
        sa.Column("xp_reward", sa.Integer, nullable=False, server_default="10"),
        sa.Column("validation_type", sa.String(20), nullable=False, server_default="community"),
        sa.Column("target_value", sa.Integer, nullable=False, server_default="1"),
    )
    op.create_index("ix_quests_complexity", "quests", ["complexity"])

    op.create_table(
        "quest_proofs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quest_id", UUID(as_uuid=True), sa.ForeignKey("quests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_date", sa.Date, nullable=False),
        sa.Column("proof_text", sa.Text, nullable=True),
        sa.Column("photo_keys", sa.JSON, nullable=False),
        sa.Column("voice_keys", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="uploading"),
        sa.Column("belief_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("belief_count >= 0", name="ck_quest_proofs_belief_count"),
    )
    op.create_index("ix_quest_proofs_user_id", "quest_proofs", ["user_id"])
    op.create_index("ix_quest_proofs_created_at", "quest_proofs", ["created_at"])

    op.create_table(
        "quest_proof_beliefs",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("proof_id", UUID(as_uuid=True), sa.ForeignKey("quest_proofs.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "user_quest_status",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("quest_id", UUID(as_uuid=True), sa.ForeignKey("quests.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("assigned_date", sa.Date, primary_key=True),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("current_value", sa.Integer, nullable=False, server_default="0"),
        sa.Column("quest_status", sa.String(20), nullable=False, server_default="not_started"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("user_quest_status")
    op.drop_table("quest_proof_beliefs")
    op.drop_index("ix_quest_proofs_created_at", table_name="quest_proofs")
    op.drop_index("ix_quest_proofs_user_id", table_name="quest_proofs")
    op.drop_table("quest_proofs")
    op.drop_index("ix_quests_complexity", table_name="quests")
    op.drop_table("quests")
    op.drop_table("users")
