"""initial schema

Revision ID: 3f1c9a7d2e40
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3f1c9a7d2e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Money, rates and quantities are kept as exact decimal strings
DECIMAL = sa.String(40)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    ]


def _document_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("job_id", sa.Integer, sa.ForeignKey("jobs.id"), nullable=False),
        sa.Column("issue_date", sa.Date, nullable=False),
        sa.Column("subtotal", DECIMAL, nullable=False, server_default="0"),
        sa.Column("tax_rate", DECIMAL, nullable=False, server_default="0"),
        sa.Column("tax_amount", DECIMAL, nullable=False, server_default="0"),
        sa.Column("total_amount", DECIMAL, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime, nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("zip", sa.String(20), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime, nullable=True),
    )

    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("scheduled_date", sa.Date, nullable=True),
        sa.Column("completed_date", sa.Date, nullable=True),
        sa.Column("location", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_jobs_customer_id", "jobs", ["customer_id"])

    op.create_table(
        "job_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.Integer, sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("quantity", DECIMAL, nullable=False),
        sa.Column("unit_price", DECIMAL, nullable=False),
        sa.Column("total_price", DECIMAL, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_job_items_job_id", "job_items", ["job_id"])

    op.create_table(
        "estimates",
        *_document_columns(),
        sa.Column("estimate_number", sa.String(32), nullable=False, unique=True),
        sa.Column("expiry_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
    )
    op.create_index("ix_estimates_job_id", "estimates", ["job_id"])

    op.create_table(
        "invoices",
        *_document_columns(),
        sa.Column("invoice_number", sa.String(32), nullable=False, unique=True),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
    )
    op.create_index("ix_invoices_job_id", "invoices", ["job_id"])


def downgrade() -> None:
    op.drop_table("invoices")
    op.drop_table("estimates")
    op.drop_table("job_items")
    op.drop_table("jobs")
    op.drop_table("customers")
