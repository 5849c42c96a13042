"""ideas table with edit lock columns

Revision ID: 3e1d7a9c52b4
Revises:
Create Date: 2025-09-02 14:21:10.318442

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e1d7a9c52b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ideas",
        sa.Column("id", sa.String(length=255), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("x", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("y", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("priority", sa.String(length=32), nullable=True),
        sa.Column("project_id", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True
        ),
        sa.Column(
            "updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True
        ),
        # 잠금: 소유자 + 획득 시각 (만료 시각은 저장하지 않음)
        sa.Column("editing_by", sa.String(length=255), nullable=True),
        sa.Column("editing_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_ideas_project_id", "ideas", ["project_id"])
    op.create_index("ix_ideas_editing_by", "ideas", ["editing_by"])
    op.create_index("ix_ideas_editing_at", "ideas", ["editing_at"])


def downgrade() -> None:
    op.drop_index("ix_ideas_editing_at", table_name="ideas")
    op.drop_index("ix_ideas_editing_by", table_name="ideas")
    op.drop_index("ix_ideas_project_id", table_name="ideas")
    op.drop_table("ideas")
