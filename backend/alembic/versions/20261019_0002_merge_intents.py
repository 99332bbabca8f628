"""add persisted merge intents

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:02
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: str | None = "20261019_0001"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "merge_intents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("target_provider_id", sa.Integer(), nullable=False),
        sa.Column("source_provider_id", sa.Integer(), nullable=False),
        sa.Column("match_type", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("stage", sa.String(length=32), nullable=False, server_default="migrating"),
        sa.Column("canonical_fields_json", sa.JSON(), nullable=False),
        sa.Column("audit_json", sa.JSON(), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_merge_intents_status", "merge_intents", ["status"], unique=False)
    op.create_index("ix_merge_intents_target_provider_id", "merge_intents", ["target_provider_id"], unique=False)
    op.create_index("ix_merge_intents_source_provider_id", "merge_intents", ["source_provider_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_merge_intents_source_provider_id", table_name="merge_intents")
    op.drop_index("ix_merge_intents_target_provider_id", table_name="merge_intents")
    op.drop_index("ix_merge_intents_status", table_name="merge_intents")
    op.drop_table("merge_intents")
