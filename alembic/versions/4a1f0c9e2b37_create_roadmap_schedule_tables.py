"""Create roadmap schedule tables

Revision ID: 4a1f0c9e2b37
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a1f0c9e2b37"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "engineers",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "squads",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
    )
    op.create_table(
        "squad_members",
        sa.Column("squad_id", sa.String(), sa.ForeignKey("squads.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("engineer_id", sa.String(), sa.ForeignKey("engineers.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "initiatives",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("lock_dates", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("lock_assignment", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("effort_estimate", sa.Float(), nullable=True),
        sa.Column("assigned_engineer_id", sa.String(), sa.ForeignKey("engineers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("assigned_squad_id", sa.String(), sa.ForeignKey("squads.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "scheduled_blocks",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("initiative_id", sa.String(), sa.ForeignKey("initiatives.id", ondelete="CASCADE"), nullable=False),
        sa.Column("engineer_id", sa.String(), sa.ForeignKey("engineers.id", ondelete="CASCADE"), nullable=True),
        sa.Column("squad_id", sa.String(), sa.ForeignKey("squads.id", ondelete="CASCADE"), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("hours_allocated", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_at_risk", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("risk_reason", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("start_date <= end_date", name="ck_scheduled_block_date_order"),
    )
    op.create_index("ix_scheduled_blocks_initiative_id", "scheduled_blocks", ["initiative_id"])
    op.create_index("ix_scheduled_blocks_engineer_id", "scheduled_blocks", ["engineer_id"])
    op.create_index("ix_scheduled_blocks_squad_id", "scheduled_blocks", ["squad_id"])
    op.create_index("ix_scheduled_blocks_start_date", "scheduled_blocks", ["start_date"])
    op.create_index("ix_scheduled_blocks_end_date", "scheduled_blocks", ["end_date"])
    op.create_table(
        "unavailability_blocks",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("engineer_id", sa.String(), sa.ForeignKey("engineers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
    )
    op.create_index("ix_unavailability_blocks_engineer_id", "unavailability_blocks", ["engineer_id"])
    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
    )
    op.create_index("ix_audit_log_timestamp", "audit_log", ["timestamp"])
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("audit_log")
    op.drop_table("unavailability_blocks")
    op.drop_table("scheduled_blocks")
    op.drop_table("initiatives")
    op.drop_table("squad_members")
    op.drop_table("squads")
    op.drop_table("engineers")
