"""add_payroll_run_paid_fields

Revision ID: a7d4e05b6c21
Revises: 3f1a9c2e7b10
Create Date: 2026-03-09 14:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a7d4e05b6c21"
down_revision: Union[str, Sequence[str], None] = "3f1a9c2e7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = inspect(bind)
    existing_cols = {col["name"] for col in inspector.get_columns("teacher_payroll_runs")}

    if "paid_at" not in existing_cols:
        op.add_column(
            "teacher_payroll_runs",
            sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        )
    if "paid_by" not in existing_cols:
        op.add_column(
            "teacher_payroll_runs",
            sa.Column("paid_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column("teacher_payroll_runs", "paid_by")
    op.drop_column("teacher_payroll_runs", "paid_at")
