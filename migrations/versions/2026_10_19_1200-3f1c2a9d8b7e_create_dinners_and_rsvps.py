"""create dinners and rsvps tables

Revision ID: 3f1c2a9d8b7e
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d8b7e"
down_revision: Union[str, None] = None
branch_labels: Union[str, None] = None
depends_on: Union[str, None] = None


def upgrade() -> None:
    op.create_table(
        "dinners",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column("title", sa.String(50), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("description", sa.String(256), nullable=False),
        sa.Column("host_id", sa.String(20), nullable=False, index=True),
        sa.Column("contact_phone", sa.String(20), nullable=False),
        sa.Column("address", sa.String(50), nullable=False),
        sa.Column("country", sa.String(30), nullable=True),
        sa.Column("latitude", sa.Float, nullable=False, server_default="0"),
        sa.Column("longitude", sa.Float, nullable=False, server_default="0"),
    )

    op.create_table(
        "rsvps",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "dinner_id",
            sa.Integer,
            sa.ForeignKey("dinners.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("attendee_name", sa.String(30), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("rsvps")
    op.drop_table("dinners")
