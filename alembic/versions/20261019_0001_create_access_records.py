"""create access_records and blobs tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
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
        "access_records",
        sa.Column("id", sa.String(length=32), primary_key=True, nullable=False),
        sa.Column("time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("photo", sa.Text(), nullable=False),
        sa.Column("video_url", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_access_records_time", "access_records", ["time"])
    op.create_index("ix_access_records_status", "access_records", ["status"])
    op.create_index("ix_access_records_status_time", "access_records", ["status", "time"])

    op.create_table(
        "blobs",
        sa.Column("key", sa.String(length=300), primary_key=True, nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=False),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("blobs")
    op.drop_index("ix_access_records_status_time", table_name="access_records")
    op.drop_index("ix_access_records_status", table_name="access_records")
    op.drop_index("ix_access_records_time", table_name="access_records")
    op.drop_table("access_records")
