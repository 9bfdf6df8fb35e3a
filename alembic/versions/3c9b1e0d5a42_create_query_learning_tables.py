"""create query learning tables

Revision ID: 3c9b1e0d5a42
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c9b1e0d5a42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "ai_query_learning",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("dataset_id", sa.String(length=128), nullable=False),
        sa.Column("company_group_id", sa.String(length=128), nullable=True),
        sa.Column("question_text", sa.String(length=500), nullable=False),
        sa.Column("intent", sa.String(length=32), nullable=False),
        sa.Column("query_text", sa.Text(), nullable=False),
        sa.Column("query_hash", sa.String(length=32), nullable=False),
        sa.Column("measures_used", sa.JSON(), nullable=True),
        sa.Column("columns_used", sa.JSON(), nullable=True),
        sa.Column("times_reused", sa.Integer(), server_default="0", nullable=False),
        sa.Column("success", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("error_message", sa.String(length=500), nullable=True),
        sa.Column("source", sa.String(length=16), server_default="chat", nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("dataset_id", "query_hash", name="uq_query_learning_dataset_hash"),
    )
    op.create_index("ix_ai_query_learning_dataset_id", "ai_query_learning", ["dataset_id"], unique=False)
    op.create_index(
        "ix_ai_query_learning_company_group_id",
        "ai_query_learning",
        ["company_group_id"],
        unique=False,
    )
    op.create_index("ix_ai_query_learning_intent", "ai_query_learning", ["intent"], unique=False)

    op.create_table(
        "ai_training_examples",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("dataset_id", sa.String(length=128), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("query_text", sa.Text(), nullable=False),
        sa.Column("response_text", sa.Text(), server_default="", nullable=False),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_validated", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("validation_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_ai_training_examples_dataset_id",
        "ai_training_examples",
        ["dataset_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_ai_training_examples_dataset_id", table_name="ai_training_examples")
    op.drop_table("ai_training_examples")
    op.drop_index("ix_ai_query_learning_intent", table_name="ai_query_learning")
    op.drop_index("ix_ai_query_learning_company_group_id", table_name="ai_query_learning")
    op.drop_index("ix_ai_query_learning_dataset_id", table_name="ai_query_learning")
    op.drop_table("ai_query_learning")
