"""Create poll, poll option and poll vote tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "poll",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1023), nullable=False),
        sa.Column("create_time", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_poll_user_id"), "poll", ["user_id"], unique=False)

    op.create_table(
        "poll_option",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("poll_id", sa.Integer(), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["poll_id"], ["poll.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_poll_option_poll_id"), "poll_option", ["poll_id"], unique=False)

    op.create_table(
        "poll_vote",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("poll_id", sa.Integer(), nullable=False),
        sa.Column("poll_option_id", sa.Integer(), nullable=False),
        sa.Column("vote_time", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["poll_id"], ["poll.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["poll_option_id"], ["poll_option.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "poll_id", name="uq_poll_vote_user_poll"),
    )
    op.create_index(op.f("ix_poll_vote_user_id"), "poll_vote", ["user_id"], unique=False)
    op.create_index(op.f("ix_poll_vote_poll_id"), "poll_vote", ["poll_id"], unique=False)
    op.create_index(op.f("ix_poll_vote_poll_option_id"), "poll_vote", ["poll_option_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_poll_vote_poll_option_id"), table_name="poll_vote")
    op.drop_index(op.f("ix_poll_vote_poll_id"), table_name="poll_vote")
    op.drop_index(op.f("ix_poll_vote_user_id"), table_name="poll_vote")
    op.drop_table("poll_vote")
    op.drop_index(op.f("ix_poll_option_poll_id"), table_name="poll_option")
    op.drop_table("poll_option")
    op.drop_index(op.f("ix_poll_user_id"), table_name="poll")
    op.drop_table("poll")
