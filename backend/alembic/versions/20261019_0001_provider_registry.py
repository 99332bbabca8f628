"""provider registry schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

_PROVIDER_CHILD_TABLES = (
    "notes",
    "history_log",
    "application_history",
    "alerts",
    "provider_documents",
    "provider_prices",
    "provider_price_snapshots",
    "provider_services",
    "priority_progress_log",
)


def _timestamps(with_updated_at: bool = False) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)]
    if with_updated_at:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)
        )
    return columns


def _provider_fk(nullable: bool = False) -> list[sa.Column]:
    return [sa.Column("provider_id", sa.Integer(), nullable=nullable)]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "providers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("tax_id", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("website", sa.String(length=512), nullable=True),
        sa.Column("services", sa.JSON(), nullable=True),
        sa.Column("districts", sa.JSON(), nullable=True),
        sa.Column("team_size", sa.Integer(), nullable=True),
        sa.Column("has_admin_team", sa.Boolean(), nullable=True),
        sa.Column("has_own_transport", sa.Boolean(), nullable=True),
        sa.Column("working_hours", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("application_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("first_application_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("onboarding_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("relationship_owner_id", sa.Integer(), nullable=True),
        *_timestamps(with_updated_at=True),
        sa.ForeignKeyConstraint(["relationship_owner_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_providers_email", "providers", ["email"], unique=False)
    op.create_index("ix_providers_tax_id", "providers", ["tax_id"], unique=False)
    op.create_index("ix_providers_status", "providers", ["status"], unique=False)
    op.create_index("ix_providers_relationship_owner_id", "providers", ["relationship_owner_id"], unique=False)

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("note_type", sa.String(length=32), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(with_updated_at=True),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "history_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("event_type", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "application_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.Column("raw_data", sa.JSON(), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("alert_type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "provider_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=1024), nullable=False),
        sa.Column("document_type", sa.String(length=64), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "provider_prices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("service_key", sa.String(length=128), nullable=False),
        sa.Column("variant_name", sa.String(length=255), nullable=True),
        sa.Column("price_without_vat", sa.Float(), nullable=False),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(with_updated_at=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "provider_price_snapshots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("snapshot_name", sa.String(length=255), nullable=True),
        sa.Column("snapshot_data", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "provider_services",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(),
        sa.Column("service_key", sa.String(length=128), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "priority_progress_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_provider_fk(nullable=True),
        sa.Column("priority_key", sa.String(length=128), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    for table_name in _PROVIDER_CHILD_TABLES:
        op.create_foreign_key(
            f"fk_{table_name}_provider_id_providers",
            table_name,
            "providers",
            ["provider_id"],
            ["id"],
            ondelete="CASCADE",
        )
        op.create_index(f"ix_{table_name}_provider_id", table_name, ["provider_id"], unique=False)

    op.create_table(
        "onboarding_cards",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("onboarding_type", sa.String(length=32), nullable=False),
        sa.Column("current_stage", sa.String(length=64), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(with_updated_at=True),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", name="uq_onboarding_cards_provider_id"),
    )
    op.create_table(
        "onboarding_tasks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("card_id", sa.Integer(), nullable=False),
        sa.Column("task_key", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("deadline_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(with_updated_at=True),
        sa.ForeignKeyConstraint(["card_id"], ["onboarding_cards.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_onboarding_tasks_card_id", "onboarding_tasks", ["card_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_onboarding_tasks_card_id", table_name="onboarding_tasks")
    op.drop_table("onboarding_tasks")
    op.drop_table("onboarding_cards")
    for table_name in reversed(_PROVIDER_CHILD_TABLES):
        op.drop_index(f"ix_{table_name}_provider_id", table_name=table_name)
        op.drop_table(table_name)
    op.drop_index("ix_providers_relationship_owner_id", table_name="providers")
    op.drop_index("ix_providers_status", table_name="providers")
    op.drop_index("ix_providers_tax_id", table_name="providers")
    op.drop_index("ix_providers_email", table_name="providers")
    op.drop_table("providers")
    op.drop_table("users")
