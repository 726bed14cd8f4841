"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "exchanges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("telegram_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_exchanges_telegram_id", "exchanges", ["telegram_id"], unique=True)

    op.create_table(
        "gift_groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("exchange_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["exchange_id"], ["exchanges.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("exchange_id", "name", name="uq_gift_groups_exchange_name"),
    )

    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("exchange_id", sa.Integer(), nullable=False),
        sa.Column("telegram_id", sa.BigInteger(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["exchange_id"], ["exchanges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_id"], ["gift_groups.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("exchange_id", "telegram_id", name="uq_participants_exchange_telegram"),
    )

    op.create_table(
        "participant_assignments",
        sa.Column("giver_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["giver_id"], ["participants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipient_id"], ["participants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("giver_id", "recipient_id"),
    )


def downgrade() -> None:
    op.drop_table("participant_assignments")
    op.drop_table("participants")
    op.drop_table("gift_groups")
    op.drop_index("ix_exchanges_telegram_id", table_name="exchanges")
    op.drop_table("exchanges")
