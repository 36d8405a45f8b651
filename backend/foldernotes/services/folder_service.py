"""
FolderNotes Backend — Folder Service
=====================================

What:  List, create and delete folders; move orphaned notes on delete.
Who:   Called by the folder routes and by the startup bootstrap.

Delete Cascade:
    ┌──────────────┐    ┌─────────────────────┐    ┌──────────────────────┐
    │ Delete row   │───▶│ Find oldest folder  │───▶│ Bulk-move its notes  │
    │ (if present) │    │ still remaining     │    │ (skipped if none)    │
    └──────────────┘    └─────────────────────┘    └──────────────────────┘

    Notes are never deleted with their folder. The three statements share
    the request's session and are committed together, so other requests see
    either the folder with its notes or the notes already moved.
    When the deleted folder was the last one, its notes keep the stale
    folder id and are only reachable through GET /api/notes.

Error Handling:
    Store exceptions are wrapped in StoreUnavailableError carrying the raw
    driver message (→ HTTP 500).
"""

import logging
from typing import List, Optional

from sqlalchemy import asc, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from foldernotes.database import utcnow
from foldernotes.exceptions import StoreUnavailableError
from foldernotes.models.folder import Folder
from foldernotes.models.note import Note
from foldernotes.schemas.folder import FolderResponse

logger = logging.getLogger(__name__)


def folder_to_response(folder: Folder) -> FolderResponse:
    return FolderResponse(
        id=folder.id,
        name=folder.name,
        is_open=folder.is_open,
        created_at=folder.created_at,
    )


class FolderService:
    """
    Business logic for folders.

    Stateless: every method receives the session for the current request.
    """

    async def list_folders(self, db: AsyncSession) -> List[FolderResponse]:
        """All folders, oldest first."""
        try:
            result = await db.execute(
                select(Folder).order_by(asc(Folder.created_at), asc(Folder.id))
            )
            return [folder_to_response(f) for f in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error listing folders: %s", str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "list_folders"},
            )

    async def create_folder(self, db: AsyncSession, name: str) -> FolderResponse:
        """Persist a new open folder named `name`."""
        try:
            folder = Folder(name=name, is_open=True, created_at=utcnow())
            db.add(folder)
            await db.commit()
            logger.info("Folder created: %s (%s)", folder.id, name)
            return folder_to_response(folder)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error creating folder: %s", str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "create_folder"},
            )

    async def count_folders(self, db: AsyncSession) -> int:
        try:
            result = await db.execute(select(func.count()).select_from(Folder))
            return result.scalar() or 0
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "count_folders"},
            )

    async def oldest_folder(self, db: AsyncSession) -> Optional[Folder]:
        result = await db.execute(
            select(Folder).order_by(asc(Folder.created_at), asc(Folder.id)).limit(1)
        )
        return result.scalar_one_or_none()

    async def delete_folder(self, db: AsyncSession, folder_id: str) -> int:
        """
        Delete a folder and move its notes to the oldest remaining folder.

        Deleting an id that does not exist still runs the reassignment step,
        so notes pointing at a long-gone folder get picked up too.

        Returns:
            Number of notes reassigned (0 when no folder remains).
        """
        try:
            deleted = await db.execute(delete(Folder).where(Folder.id == folder_id))

            target = await self.oldest_folder(db)
            reassigned = 0
            if target is not None:
                result = await db.execute(
                    update(Note)
                    .where(Note.folder_id == folder_id)
                    .values(folder_id=target.id)
                    .execution_options(synchronize_session=False)
                )
                reassigned = result.rowcount or 0

            await db.commit()

            if target is None:
                logger.warning(
                    "Folder %s deleted with no remaining folder; its notes are orphaned",
                    folder_id,
                )
            else:
                logger.info(
                    "Folder %s deleted (%d row), %d notes moved to %s",
                    folder_id, deleted.rowcount or 0, reassigned, target.id,
                )
            return reassigned

        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error deleting folder %s: %s", folder_id, str(e))
            raise StoreUnavailableError(
                message=str(e),
                context={"operation": "delete_folder", "folder_id": folder_id},
            )


folder_service = FolderService()
