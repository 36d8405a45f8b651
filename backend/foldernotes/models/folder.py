"""
FolderNotes Backend — Folder SQLAlchemy Model
==============================================

What:  ORM model representing the `folders` table.
Who:   Used by FolderService, the startup bootstrap, and Alembic.

Lifecycle:
    1. Created by a user (POST /api/folders) or by the startup bootstrap
    2. Never updated through the API (`is_open` is UI state set at creation)
    3. Deleted by a user; its notes move to the oldest remaining folder

Index on created_at:
    Folders are always listed oldest first, and the delete cascade looks up
    the oldest remaining folder.
"""

from datetime import datetime

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from foldernotes.database import Base, UTCDateTime, new_id, utcnow


class Folder(Base):
    """A named container for notes."""

    __tablename__ = "folders"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
        comment="UUID4 text identifier",
    )

    # Names are not unique; two folders may share a name
    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Display name",
    )

    is_open: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the folder is expanded in the sidebar",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        comment="When this folder was created (UTC); never changes",
    )

    __table_args__ = (
        Index("idx_folders_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name='{self.name}')>"
