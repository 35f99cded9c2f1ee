"""Baseline: archive_index table

- id (integer identity)
- class_name, web_name, org_name, org_web_link (NOT NULL)
- created_at, updated_at (NOT NULL, set by the API)
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_0001_archive_index"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "archive_index",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("class_name", sa.String(200), nullable=False),
        sa.Column("web_name", sa.String(400), nullable=False),
        sa.Column("org_name", sa.String(400), nullable=False),
        sa.Column("org_web_link", sa.String(2048), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("archive_index")
