"""Create folders and notes tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates `folders` and `notes`.
How:   notes.folder_id is deliberately not a foreign key (notes survive their
       folder); notes.files holds the embedded attachment list as JSON(B).

Rollback: downgrade() drops both tables (destructive — all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "folders",
        sa.Column("id", sa.String(36), nullable=False, comment="UUID4 text identifier"),
        sa.Column("name", sa.Text(), nullable=False, comment="Display name"),
        sa.Column(
            "is_open",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
            comment="Whether the folder is expanded in the sidebar",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When this folder was created (UTC); never changes",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_folders_created_at", "folders", ["created_at"])

    op.create_table(
        "notes",
        sa.Column("id", sa.String(36), nullable=False, comment="UUID4 text identifier"),
        sa.Column(
            "folder_id",
            sa.Text(),
            nullable=True,
            comment="Owning folder id (not enforced as a foreign key)",
        ),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True, comment="HTML body"),
        sa.Column(
            "files",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            server_default=sa.text("'[]'"),
            comment="Embedded attachments in display order",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="Refreshed on every mutation",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notes_folder_updated", "notes", ["folder_id", "updated_at"])
    op.create_index("idx_notes_updated_at", "notes", ["updated_at"])


def downgrade() -> None:
    op.drop_index("idx_notes_updated_at", table_name="notes")
    op.drop_index("idx_notes_folder_updated", table_name="notes")
    op.drop_table("notes")
    op.drop_index("idx_folders_created_at", table_name="folders")
    op.drop_table("folders")
