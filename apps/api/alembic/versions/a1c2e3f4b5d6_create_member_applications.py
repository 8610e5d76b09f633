"""create member_applications

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 10:00:00.000000

Creates the member_applications table. Records are insert-only; id and
created_at are assigned on insert, cv_path is NULL when no CV was sent.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "member_applications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("skills", sa.String(length=500), nullable=True),
        sa.Column("consent", sa.Boolean(), nullable=False),
        sa.Column("cv_path", sa.String(length=512), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_member_applications_email", "member_applications", ["email"])
    op.create_index("ix_member_applications_created_at", "member_applications", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_member_applications_created_at", table_name="member_applications")
    op.drop_index("ix_member_applications_email", table_name="member_applications")
    op.drop_table("member_applications")
