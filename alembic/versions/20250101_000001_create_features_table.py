"""Create the features table.

Revision ID: 001_features
Revises:
Create Date: 2025-01-01

One row per (name, scope) pair:
- name / scope: feature name and free-form scope string ('global' is the fallback)
- enabled: flag state for that scope
- value: optional JSON-encoded payload stored alongside the flag
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_features"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the features table with its unique key and scope index."""
    op.create_table(
        "features",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),  # e.g. dark_mode
        sa.Column(
            "scope", sa.String(100), nullable=False, server_default="global"
        ),  # e.g. global, beta, plan:pro
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("modified_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "scope", name="uq_features_name_scope"),
    )
    op.create_index("ix_features_scope", "features", ["scope"])


def downgrade() -> None:
    """Drop the features table."""
    op.drop_index("ix_features_scope", table_name="features")
    op.drop_table("features")
