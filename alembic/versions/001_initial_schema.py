"""Initial schema - options store and blocked attempt log.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Operator-editable options: blacklists, flags, rejection message
    op.create_table(
        "wmfo_options",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("value", sa.Text, nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_wmfo_options_name", "wmfo_options", ["name"], unique=True)

    # Blocked checkout attempts, append-only
    op.create_table(
        "wmfo_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(50), nullable=False, server_default=""),
        sa.Column("ip", sa.String(64), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
        sa.Column("billing_address", sa.Text, nullable=False, server_default=""),
        sa.Column("shipping_address", sa.Text, nullable=False, server_default=""),
        sa.Column("blacklisted_reason", sa.String(100), nullable=False),
        sa.Column("timestamp", sa.DateTime, nullable=False),
    )
    op.create_index("ix_wmfo_logs_timestamp", "wmfo_logs", ["timestamp"])
    op.create_index("ix_wmfo_logs_reason", "wmfo_logs", ["blacklisted_reason"])


def downgrade() -> None:
    op.drop_index("ix_wmfo_logs_reason", table_name="wmfo_logs")
    op.drop_index("ix_wmfo_logs_timestamp", table_name="wmfo_logs")
    op.drop_table("wmfo_logs")
    op.drop_index("ix_wmfo_options_name", table_name="wmfo_options")
    op.drop_table("wmfo_options")
