"""init

Revision ID: 0001_init
Revises: 
Create Date: 2025-09-15

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]


def upgrade():
    op.create_table(
        "engineer",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("display_name", sa.String(length=256), nullable=False),
        sa.Column("slug", sa.String(length=256), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("company", sa.String(length=256), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_engineer_display_name", "engineer", ["display_name"])
    op.create_index("ix_engineer_slug", "engineer", ["slug"], unique=True)

    for table in ("customer", "program"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=256), nullable=False, unique=True),
            *_timestamps(),
        )
    op.create_table(
        "project_manager",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=256), nullable=False, unique=True),
        sa.Column("email", sa.String(length=256), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "project",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.id", ondelete="SET NULL"), nullable=True),
        sa.Column("program_id", sa.Integer(), sa.ForeignKey("program.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "project_manager_id",
            sa.Integer(),
            sa.ForeignKey("project_manager.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("project_type", sa.String(length=32), nullable=False, server_default="WP"),
        sa.Column("average_hourly_rate", sa.Float(), nullable=True),
        sa.Column("budget", sa.Float(), nullable=True),
        sa.Column("project_status", sa.String(length=32), nullable=True, server_default="Realizace"),
        sa.Column("probability", sa.Float(), nullable=True),
        sa.Column("presales_phase", sa.String(length=32), nullable=True),
        sa.Column("presales_start_date", sa.Date(), nullable=True),
        sa.Column("presales_end_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_project_code", "project", ["code"], unique=True)

    op.create_table(
        "license",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("provider", sa.String(length=256), nullable=True),
        sa.Column("license_type", sa.String(length=64), nullable=True),
        sa.Column("total_seats", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cost", sa.Float(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_license_name", "license", ["name"], unique=True)

    op.create_table(
        "project_license",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=False),
        sa.Column("license_id", sa.Integer(), sa.ForeignKey("license.id", ondelete="CASCADE"), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False, server_default="100"),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "license_id", name="uq_project_license"),
    )
    op.create_index("ix_project_license_project_id", "project_license", ["project_id"])
    op.create_index("ix_project_license_license_id", "project_license", ["license_id"])

    op.create_table(
        "planning_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("engineer_id", sa.Integer(), sa.ForeignKey("engineer.id", ondelete="SET NULL"), nullable=True),
        sa.Column("konstrukter", sa.String(length=256), nullable=False),
        sa.Column("cw", sa.String(length=16), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("mesic", sa.String(length=32), nullable=True),
        sa.Column("projekt", sa.String(length=64), nullable=True),
        sa.Column("mh_tyden", sa.Float(), nullable=True),
        sa.Column("is_tentative", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("week_monday", sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("engineer_id", "cw", "year", name="uq_planning_engineer_week"),
    )
    op.create_index("ix_planning_entry_engineer_id", "planning_entry", ["engineer_id"])
    op.create_index("ix_planning_entry_konstrukter", "planning_entry", ["konstrukter"])
    op.create_index("ix_planning_entry_year", "planning_entry", ["year"])

    op.create_table(
        "import_run",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("file_name", sa.String(length=512), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="queued"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rows_loaded", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_import_run_file_hash", "import_run", ["file_hash"])

    op.create_table(
        "import_error",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("import_run_id", sa.Integer(), sa.ForeignKey("import_run.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sheet", sa.String(length=128), nullable=True),
        sa.Column("row_num", sa.Integer(), nullable=True),
        sa.Column("column", sa.String(length=128), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_import_error_import_run_id", "import_error", ["import_run_id"])


def downgrade():
    op.drop_table("import_error")
    op.drop_table("import_run")
    op.drop_table("planning_entry")
    op.drop_table("project_license")
    op.drop_table("license")
    op.drop_table("project")
    op.drop_table("project_manager")
    op.drop_table("program")
    op.drop_table("customer")
    op.drop_table("engineer")
