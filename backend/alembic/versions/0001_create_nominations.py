"""Create the shared nominations table.

Revision ID: 0001
Revises: —
Create Date: 2026-10-18 10:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── nominations ───────────────────────────────────────────────────────
    # imdb_id is indexed but not unique: duplicates are only advised against
    # by the session controller.
    op.create_table(
        "nominations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("movie", sa.String(500), nullable=False),
        sa.Column("imdb_id", sa.String(20), nullable=True),
        sa.Column("poster", sa.String(1000), nullable=True),
        sa.Column("votes", sa.Integer(), nullable=True, server_default=sa.text("0")),
        sa.Column("watched", sa.Boolean(), nullable=True, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("votes >= 0", name="chk_nominations_votes_non_negative"),
    )
    op.create_index("ix_nominations_imdb_id", "nominations", ["imdb_id"])


def downgrade() -> None:
    op.drop_index("ix_nominations_imdb_id", table_name="nominations")
    op.drop_table("nominations")
