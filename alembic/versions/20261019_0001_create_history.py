"""Create prescription history table.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "history",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("original_text", sa.Text(), nullable=False),
        sa.Column("simplified_text", sa.Text(), nullable=False),
        sa.Column("prescription", sa.JSON(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("processing_status", sa.String(length=16), nullable=False, server_default="completed"),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("search_terms", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.String(length=32), nullable=False),
        sa.Column("updated_at", sa.String(length=32), nullable=False),
    )
    op.create_index(op.f("ix_history_processing_status"), "history", ["processing_status"], unique=False)
    op.create_index(op.f("ix_history_created_at"), "history", ["created_at"], unique=False)
    op.create_index("ix_history_status_created_at", "history", ["processing_status", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_history_status_created_at", table_name="history")
    op.drop_index(op.f("ix_history_created_at"), table_name="history")
    op.drop_index(op.f("ix_history_processing_status"), table_name="history")
    op.drop_table("history")
