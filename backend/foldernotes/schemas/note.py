"""
FolderNotes Backend — Note Schemas
===================================

What:  Pydantic models for note and attachment payloads.
Why:   Defines the JSON contract of /api/notes and the shape of the file
       objects embedded in each note row.

Attachments:
    `NoteFileIn` is what a client sends; `NoteFile` is what gets stored and
    returned. The only difference is that a stored file always has an id.
    The `data` field is an opaque base64 string; it is never decoded.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from foldernotes.schemas.common import ApiModel


# ══════════════════════════════════════════════════════════════════════════
# Attachments
# ══════════════════════════════════════════════════════════════════════════


class NoteFileIn(ApiModel):
    """
    Attachment as sent by a client.

    `id` is normally absent; files echoed back through PUT /api/notes/{id}
    keep the id they were given when first stored.
    """
    id: Optional[str] = Field(default=None, description="Existing file id, if any")
    name: Optional[str] = Field(default=None, description="Original file name")
    size: Optional[int] = Field(default=None, description="Size in bytes")
    type: Optional[str] = Field(default=None, description="MIME type")
    data: Optional[str] = Field(default=None, description="Base64-encoded payload")
    is_image: Optional[bool] = Field(default=None, description="Whether the file renders as an image")


class NoteFile(NoteFileIn):
    """Stored attachment; always carries its id."""
    id: str = Field(description="File identifier, unique within its note")


class FileAttachRequest(ApiModel):
    """Body of POST /api/notes/{id}/files."""
    file: NoteFileIn


# ══════════════════════════════════════════════════════════════════════════
# Notes
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(ApiModel):
    """
    Body of POST /api/notes.

    folderId is stored as given; it is not checked against existing folders.
    Missing or empty title/content fall back to the note defaults.
    """
    folder_id: Optional[str] = Field(default=None, description="Owning folder id")
    title: Optional[str] = None
    content: Optional[str] = None


class NoteUpdate(ApiModel):
    """
    Body of PUT /api/notes/{id}.

    All three fields are replaced on every update. An absent title or
    content is stored as null and absent files as an empty list.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    files: Optional[List[NoteFileIn]] = None


class NoteResponse(ApiModel):
    """
    Serialized note, including its attachments.

    Example:
        {"id": "9c2f...", "folderId": "5b1e...", "title": "New note",
         "content": "<p>Start writing...</p>", "files": [],
         "createdAt": "...", "updatedAt": "..."}
    """
    id: str
    folder_id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    files: List[NoteFile] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
