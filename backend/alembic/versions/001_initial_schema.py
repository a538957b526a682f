"""Restaurants, slot config and partner bookings

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "restaurant",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.Text(), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False, server_default=sa.text("''")),
    )
    op.create_table(
        "restaurant_config",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "restaurant_id",
            sa.Integer(),
            sa.ForeignKey("restaurant.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("booking_step", sa.Integer(), nullable=True),
        sa.Column("max_booking_by_step", sa.Integer(), nullable=True),
        sa.Column("booking_step_table_count", sa.Integer(), nullable=True),
        sa.Column("today_booking_noon_max_hour", sa.Text(), nullable=True),
        sa.Column("today_booking_evening_max_hour", sa.Text(), nullable=True),
    )
    op.create_table(
        "booking",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.Text(), nullable=False, unique=True),
        sa.Column(
            "restaurant_id",
            sa.Integer(),
            sa.ForeignKey("restaurant.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone_number", sa.Text(), nullable=True),
        sa.Column("tableware_count", sa.Integer(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("hour", sa.Text(), nullable=False),
        sa.Column("source", sa.Text(), nullable=True),
        sa.Column("annulation", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("refuse", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("sending_sms", sa.Integer(), nullable=False),
        sa.Column("remind_sms", sa.Integer(), nullable=False),
        sa.Column("is_waiting", sa.Integer(), nullable=False),
        sa.Column("confirmed", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_booking_restaurant_id", "booking", ["restaurant_id"], unique=False)
    op.create_index("ix_booking_slot", "booking", ["restaurant_id", "date", "hour"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_booking_slot", table_name="booking")
    op.drop_index("ix_booking_restaurant_id", table_name="booking")
    op.drop_table("booking")
    op.drop_table("restaurant_config")
    op.drop_table("restaurant")
