# Importing the models registers them on Base.metadata
from foldernotes.models.folder import Folder
from foldernotes.models.note import DEFAULT_NOTE_CONTENT, DEFAULT_NOTE_TITLE, Note

__all__ = ["Folder", "Note", "DEFAULT_NOTE_TITLE", "DEFAULT_NOTE_CONTENT"]
