"""
FolderNotes Backend — Note SQLAlchemy Model
============================================

What:  ORM model representing the `notes` table.
Why:   Notes are the primary content entity: rich text plus attachments.
Who:   Used by NoteService for CRUD operations and by Alembic.

Table Design Rationale:
    - folder_id is a plain column, not a foreign key: a note may reference a
      folder that never existed or was deleted without a successor
      (orphaned notes stay retrievable through GET /api/notes).
    - files is a JSON array embedded in the row. Attachments belong to
      exactly one note, are ordered, and are only ever read or written
      together with it, so they do not get a table of their own.
    - title/content are nullable because a note update replaces them with
      whatever the client sends, including nothing.

Index on (folder_id, updated_at):
    Serves "notes in folder X, most recently edited first".
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from foldernotes.database import Base, UTCDateTime, new_id, utcnow

DEFAULT_NOTE_TITLE = "New note"
DEFAULT_NOTE_CONTENT = "<p>Start writing...</p>"


class Note(Base):
    """
    A note owned by one folder (or orphaned), with an ordered list of files.

    Each element of `files` is a dict with keys:
        id, name, size, type, data (base64), isImage
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
        comment="UUID4 text identifier",
    )

    folder_id: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Owning folder id (not enforced as a foreign key)",
    )

    title: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=DEFAULT_NOTE_TITLE,
    )

    content: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=DEFAULT_NOTE_CONTENT,
        comment="HTML body",
    )

    # JSONB on PostgreSQL, JSON text elsewhere. Always reassign a new list
    # when mutating; in-place appends are not tracked by the ORM.
    files: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
        comment="Embedded attachments in display order",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        comment="Refreshed on every mutation",
    )

    __table_args__ = (
        Index("idx_notes_folder_updated", "folder_id", "updated_at"),
        Index("idx_notes_updated_at", "updated_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, folder_id={self.folder_id}, "
            f"files={len(self.files or [])})>"
        )
