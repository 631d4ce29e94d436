"""Tariff configurations table.

Revision ID: 001
Revises:
"""

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tariff_configurations",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "state",
            sa.Enum("DRAFT", "ACTIVE", "PAUSED", "FINALIZED", name="configurationstatetype"),
            nullable=False,
        ),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("schedule", sa.Text(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.String(64), nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_tariff_configurations_state_effective",
        "tariff_configurations",
        ["state", "effective_from"],
    )
    op.create_index(
        "ix_tariff_configurations_window",
        "tariff_configurations",
        ["effective_from", "expires_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_tariff_configurations_window", table_name="tariff_configurations")
    op.drop_index("ix_tariff_configurations_state_effective", table_name="tariff_configurations")
    op.drop_table("tariff_configurations")
    sa.Enum(name="configurationstatetype").drop(op.get_bind(), checkfirst=True)
