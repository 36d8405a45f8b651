"""
FolderNotes Backend — Folder Schemas
=====================================

What:  Request and response bodies for /api/folders.
"""

from datetime import datetime

from pydantic import Field

from foldernotes.schemas.common import ApiModel


class FolderCreate(ApiModel):
    """Body of POST /api/folders."""
    name: str = Field(min_length=1, description="Display name (not required to be unique)")


class FolderResponse(ApiModel):
    """
    Serialized folder.

    Example:
        {"id": "5b1e...", "name": "Work", "isOpen": true,
         "createdAt": "2024-01-15T12:00:00Z"}
    """
    id: str = Field(description="Folder identifier")
    name: str
    is_open: bool = Field(default=True, description="Sidebar expansion state")
    created_at: datetime = Field(description="Creation time (UTC)")
