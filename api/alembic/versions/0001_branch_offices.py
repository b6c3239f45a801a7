"""create branch_offices table

Revision ID: 0001_branch_offices
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_branch_offices"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "branch_offices",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("address", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(100), nullable=False),
        sa.Column("fax_number", sa.String(100), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_branch_offices_name", "branch_offices", ["name"])
    op.create_index("ix_branch_offices_deleted_at", "branch_offices", ["deleted_at"])


def downgrade() -> None:
    op.drop_index("ix_branch_offices_deleted_at", table_name="branch_offices")
    op.drop_index("ix_branch_offices_name", table_name="branch_offices")
    op.drop_table("branch_offices")
