"""create dashboard tables

Revision ID: 20261018_0001
Revises: 
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("photo_url", sa.String(length=1024), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("seeded_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_user_profiles_user_id", "user_profiles", ["user_id"], unique=True)

    op.create_table(
        "habits",
        sa.Column("pk", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("habit_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=16), nullable=False, server_default="custom"),
        sa.Column("target_type", sa.String(length=16), nullable=False, server_default="daily"),
        sa.Column("target_value", sa.Float(), nullable=False, server_default="1"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "habit_id", name="uq_habit_per_user"),
    )
    op.create_index("ix_habits_user_id", "habits", ["user_id"], unique=False)
    op.create_index("ix_habits_habit_id", "habits", ["habit_id"], unique=False)

    op.create_table(
        "day_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("date_string", sa.String(length=10), nullable=False),
        sa.Column("habit_status", sa.JSON(), nullable=False),
        sa.Column("mood", sa.String(length=16), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "date_string", name="uq_day_log_per_date"),
    )
    op.create_index("ix_day_logs_user_id", "day_logs", ["user_id"], unique=False)
    op.create_index("ix_day_logs_date_string", "day_logs", ["date_string"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_day_logs_date_string", table_name="day_logs")
    op.drop_index("ix_day_logs_user_id", table_name="day_logs")
    op.drop_table("day_logs")

    op.drop_index("ix_habits_habit_id", table_name="habits")
    op.drop_index("ix_habits_user_id", table_name="habits")
    op.drop_table("habits")

    op.drop_index("ix_user_profiles_user_id", table_name="user_profiles")
    op.drop_table("user_profiles")
