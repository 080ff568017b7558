"""create membership and event tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260101_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create membership and event tables."""
    op.create_table(
        "accounts_modules",
        sa.Column("module_name", sa.Text(), nullable=False),
        sa.Column("account_id", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint(
            "module_name", "account_id", name="pk_accounts_modules"
        ),
    )

    op.create_table(
        "events",
        sa.Column("event_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("phase", sa.Text(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("exit", sa.Integer(), nullable=False),
        sa.Column("exception", sa.Text(), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("machine_id", sa.Text(), nullable=False),
        sa.Column("core_version", sa.Text(), nullable=False),
        sa.Column("core_path", sa.Text(), nullable=True),
    )
    op.create_index("ix_events_started_at", "events", ["started_at"])


def downgrade() -> None:
    """Drop membership and event tables."""
    op.drop_index("ix_events_started_at", table_name="events")
    op.drop_table("events")
    op.drop_table("accounts_modules")
