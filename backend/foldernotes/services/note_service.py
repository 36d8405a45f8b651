"""
FolderNotes Backend — Note Service
===================================

What:  CRUD for notes and the attachment list embedded in each note.
Who:   Called by the note routes.

Timestamp Rules:
    - create: created_at == updated_at == now
    - every mutation (update, add file, remove file) moves updated_at
      strictly forward; if the clock has not advanced past the stored value
      the new value is the stored one plus a microsecond
    - folder reassignment (see FolderService) does not touch updated_at

Attachment Rules:
    - a file gets its id when it is persisted, never earlier
    - add appends at the end (list order is display order)
    - remove filters by id; an unknown id leaves the list as it was but
      still counts as a mutation
    - the files column is always reassigned to a new list so the ORM sees
      the change

Concurrent Writers:
    update / add file / remove file read the note, change it in Python and
    write it back. The read takes the row lock (SELECT ... FOR UPDATE on
    PostgreSQL, BEGIN IMMEDIATE on SQLite), so two requests touching the
    same note run one after the other and neither change is lost.

Missing Notes:
    update / add file / remove file raise NotFoundError (→ 404).
    delete of a missing note is a silent success.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import asc, delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from foldernotes.database import new_id, utcnow
from foldernotes.exceptions import NotFoundError, StoreUnavailableError
from foldernotes.models.note import DEFAULT_NOTE_CONTENT, DEFAULT_NOTE_TITLE, Note
from foldernotes.schemas.note import NoteFile, NoteFileIn, NoteResponse, NoteUpdate

logger = logging.getLogger(__name__)


def note_to_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        folder_id=note.folder_id,
        title=note.title,
        content=note.content,
        files=[NoteFile.model_validate(f) for f in (note.files or [])],
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def stored_file(file: NoteFileIn, keep_id: bool = False) -> Dict[str, Any]:
    """Turn an incoming attachment into the dict kept in `Note.files`."""
    file_id = file.id if keep_id and file.id else new_id()
    return NoteFile(
        id=file_id,
        name=file.name,
        size=file.size,
        type=file.type,
        data=file.data,
        is_image=file.is_image,
    ).model_dump(by_alias=True)


def touch(note: Note) -> None:
    """Refresh updated_at, keeping it strictly increasing."""
    now = utcnow()
    if note.updated_at is not None and now <= note.updated_at:
        now = note.updated_at + timedelta(microseconds=1)
    note.updated_at = now


class NoteService:
    """
    Business logic layer for note operations.

    Each method commits its own unit of work before building the response,
    so the result a client receives is already durable.
    """

    async def _get(
        self, db: AsyncSession, note_id: str, for_update: bool = False
    ) -> Optional[Note]:
        query = select(Note).where(Note.id == note_id)
        if for_update:
            # Row lock on PostgreSQL; SQLite transactions already start with
            # BEGIN IMMEDIATE (see database.py)
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_notes(
        self,
        db: AsyncSession,
        folder_id: Optional[str] = None,
    ) -> List[NoteResponse]:
        """
        Notes ordered by updated_at, most recent first.

        Args:
            folder_id: Restrict to one folder. None lists every note,
                       orphans included.
        """
        try:
            query = select(Note)
            if folder_id is not None:
                query = query.where(Note.folder_id == folder_id)
            query = query.order_by(desc(Note.updated_at), asc(Note.id))

            result = await db.execute(query)
            return [note_to_response(n) for n in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error listing notes: %s", str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "list_notes", "folder_id": folder_id},
            )

    async def create_note(
        self,
        db: AsyncSession,
        folder_id: Optional[str],
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> NoteResponse:
        """Create an empty-attachment note; blank title/content get defaults."""
        now = utcnow()
        try:
            note = Note(
                folder_id=folder_id,
                title=title or DEFAULT_NOTE_TITLE,
                content=content or DEFAULT_NOTE_CONTENT,
                files=[],
                created_at=now,
                updated_at=now,
            )
            db.add(note)
            await db.commit()
            logger.info("Note created: %s in folder %s", note.id, folder_id)
            return note_to_response(note)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error creating note: %s", str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "create_note", "folder_id": folder_id},
            )

    async def update_note(
        self,
        db: AsyncSession,
        note_id: str,
        payload: NoteUpdate,
    ) -> NoteResponse:
        """
        Replace title, content and files of a note.

        This is a full replace, not a merge: fields missing from the payload
        overwrite the stored values too.

        Raises:
            NotFoundError: no note with this id
        """
        try:
            note = await self._get(db, note_id, for_update=True)
            if note is None:
                raise NotFoundError(resource="note", resource_id=note_id)

            note.title = payload.title
            note.content = payload.content
            # Echoed files keep their ids; a repeated id gets a fresh one
            files: List[Dict[str, Any]] = []
            seen = set()
            for f in payload.files or []:
                stored = stored_file(f, keep_id=f.id not in seen)
                seen.add(stored["id"])
                files.append(stored)
            note.files = files
            touch(note)

            await db.commit()
            return note_to_response(note)

        except NotFoundError:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "update_note", "note_id": note_id},
            )

    async def delete_note(self, db: AsyncSession, note_id: str) -> bool:
        """
        Delete a note and, with it, its attachments.

        Returns:
            True if a row was removed. Callers answer success either way.
        """
        try:
            result = await db.execute(delete(Note).where(Note.id == note_id))
            await db.commit()
            removed = bool(result.rowcount)
            if removed:
                logger.info("Note deleted: %s", note_id)
            return removed
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "delete_note", "note_id": note_id},
            )

    async def add_file(
        self,
        db: AsyncSession,
        note_id: str,
        file: NoteFileIn,
    ) -> NoteResponse:
        """
        Append an attachment to a note.

        Raises:
            NotFoundError: no note with this id (nothing is written)
        """
        try:
            note = await self._get(db, note_id, for_update=True)
            if note is None:
                raise NotFoundError(resource="note", resource_id=note_id)

            note.files = list(note.files or []) + [stored_file(file)]
            touch(note)

            await db.commit()
            logger.info(
                "File attached to note %s (%d files, %s bytes)",
                note_id, len(note.files), file.size,
            )
            return note_to_response(note)

        except NotFoundError:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error attaching file to note %s: %s", note_id, str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "add_file", "note_id": note_id},
            )

    async def remove_file(
        self,
        db: AsyncSession,
        note_id: str,
        file_id: str,
    ) -> NoteResponse:
        """
        Drop the attachment with `file_id` from a note.

        Raises:
            NotFoundError: no note with this id
        """
        try:
            note = await self._get(db, note_id, for_update=True)
            if note is None:
                raise NotFoundError(resource="note", resource_id=note_id)

            before = len(note.files or [])
            note.files = [f for f in (note.files or []) if f.get("id") != file_id]
            touch(note)

            await db.commit()
            if len(note.files) == before:
                logger.debug("File %s not present on note %s", file_id, note_id)
            return note_to_response(note)

        except NotFoundError:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error removing file from note %s: %s", note_id, str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "remove_file", "note_id": note_id, "file_id": file_id},
            )


note_service = NoteService()
