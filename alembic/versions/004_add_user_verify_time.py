"""Add verify_time to user table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "004"
down_revision: str | None = "003"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("user", sa.Column("verify_time", sa.DateTime(), nullable=True))
    op.execute('UPDATE "user" SET verify_time = join_time WHERE verified')


def downgrade() -> None:
    op.drop_column("user", "verify_time")
