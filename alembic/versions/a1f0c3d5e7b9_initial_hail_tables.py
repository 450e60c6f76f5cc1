"""Create Hail configuration, fetch job and Hail object tables.

Revision ID: a1f0c3d5e7b9
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a1f0c3d5e7b9"
down_revision = None
branch_labels = None
depends_on = None

# table name -> type-specific columns
HAIL_OBJECT_TABLES = {
    "hail_article": lambda: [
        sa.Column("lede", sa.Text(), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("author", sa.String(length=255), nullable=True),
        sa.Column("article_date", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=True),
    ],
    "hail_publication": lambda: [
        sa.Column("url", sa.String(length=2048), nullable=True),
        sa.Column("due_date", sa.String(length=64), nullable=True),
    ],
    "hail_image": lambda: [
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("url", sa.String(length=2048), nullable=True),
        sa.Column("thumbnail_url", sa.String(length=2048), nullable=True),
    ],
    "hail_video": lambda: [
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("service", sa.String(length=64), nullable=True),
        sa.Column("service_id", sa.String(length=255), nullable=True),
    ],
    "hail_public_tag": lambda: [
        sa.Column("description", sa.Text(), nullable=True),
    ],
    "hail_private_tag": lambda: [
        sa.Column("description", sa.Text(), nullable=True),
    ],
}

fetch_job_status_enum = sa.Enum("starting", "running", "done", "error", name="fetch_job_status_enum")


def _base_columns():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("id", sa.Integer(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "hail_config",
        *_base_columns(),
        sa.Column("singleton_marker", sa.Integer(), nullable=False),
        sa.Column("access_token_encrypted", sa.Text(), nullable=True),
        sa.Column("access_token_expire", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refresh_token_encrypted", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("organisation_ids", sa.JSON(), nullable=False),
        sa.Column("token_version", sa.Integer(), nullable=False),
        sa.Column("api_status_current", sa.String(length=255), nullable=True),
        sa.Column("api_status_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("singleton_marker", name="uq_hail_config_singleton"),
    )
    op.create_index("ix_hail_config_created_at", "hail_config", ["created_at"])

    op.create_table(
        "hail_fetch_jobs",
        *_base_columns(),
        sa.Column("to_fetch", sa.String(length=64), nullable=False),
        sa.Column("status", fetch_job_status_enum, nullable=False),
        sa.Column("global_total", sa.Integer(), nullable=False),
        sa.Column("global_done", sa.Integer(), nullable=False),
        sa.Column("current_type", sa.String(length=64), nullable=True),
        sa.Column("current_total", sa.Integer(), nullable=False),
        sa.Column("current_done", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.String(length=1000), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_hail_fetch_jobs_created_at", "hail_fetch_jobs", ["created_at"])
    op.create_index("ix_hail_fetch_jobs_to_fetch", "hail_fetch_jobs", ["to_fetch"])
    op.create_index("ix_hail_fetch_jobs_status", "hail_fetch_jobs", ["status"])

    for table_name, type_columns in HAIL_OBJECT_TABLES.items():
        op.create_table(
            table_name,
            *_base_columns(),
            sa.Column("hail_id", sa.String(length=64), nullable=False),
            sa.Column("hail_org_id", sa.String(length=64), nullable=True),
            sa.Column("title", sa.String(length=255), nullable=True),
            sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("data", sa.JSON(), nullable=True),
            *type_columns(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table_name}_created_at", table_name, ["created_at"])
        op.create_index(f"ix_{table_name}_hail_id", table_name, ["hail_id"], unique=True)
        op.create_index(f"ix_{table_name}_hail_org_id", table_name, ["hail_org_id"])


def downgrade() -> None:
    for table_name in reversed(list(HAIL_OBJECT_TABLES)):
        op.drop_index(f"ix_{table_name}_hail_org_id", table_name=table_name)
        op.drop_index(f"ix_{table_name}_hail_id", table_name=table_name)
        op.drop_index(f"ix_{table_name}_created_at", table_name=table_name)
        op.drop_table(table_name)

    op.drop_index("ix_hail_fetch_jobs_status", table_name="hail_fetch_jobs")
    op.drop_index("ix_hail_fetch_jobs_to_fetch", table_name="hail_fetch_jobs")
    op.drop_index("ix_hail_fetch_jobs_created_at", table_name="hail_fetch_jobs")
    op.drop_table("hail_fetch_jobs")
    fetch_job_status_enum.drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_hail_config_created_at", table_name="hail_config")
    op.drop_table("hail_config")
