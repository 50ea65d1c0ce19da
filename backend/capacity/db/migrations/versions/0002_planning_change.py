"""planning change history

Revision ID: 0002_planning_change
Revises: 0001_init
Create Date: 2025-10-02
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_planning_change"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "planning_change",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("engineer_id", sa.Integer(), sa.ForeignKey("engineer.id", ondelete="SET NULL"), nullable=True),
        sa.Column("konstrukter", sa.String(length=256), nullable=False),
        sa.Column("cw", sa.String(length=16), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("change_type", sa.String(length=32), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("changed_by", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_planning_change_engineer_id", "planning_change", ["engineer_id"])


def downgrade():
    op.drop_table("planning_change")
