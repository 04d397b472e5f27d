"""create identity_mapping

Revision ID: 0001
Revises:
Create Date: 2026-09-14 10:12:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "identity_mapping",
        sa.Column("identity_key", sa.String(length=255), nullable=False),
        sa.Column("product_id", sa.BigInteger(), nullable=False),
        sa.Column("variant_id", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("identity_key", name=op.f("pk_identity_mapping")),
    )


def downgrade() -> None:
    op.drop_table("identity_mapping")
