"""
FolderNotes Backend — Startup Bootstrap
========================================

What:  Guarantees at least one folder exists once the process has started.
When:  Once per process, from the application lifespan, after the schema
       has been ensured. Never per request.

Concurrency:
    Two processes starting at the same moment against an empty store can
    both see zero folders and both create a default one. No lock prevents
    this; the duplicate is an ordinary folder the user can delete.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from foldernotes.schemas.folder import FolderResponse
from foldernotes.services.folder_service import folder_service

logger = logging.getLogger(__name__)


async def ensure_default_folder(db: AsyncSession, name: str) -> Optional[FolderResponse]:
    """
    Create the default folder when the store holds none.

    Returns:
        The created folder, or None if folders already existed.
    """
    count = await folder_service.count_folders(db)
    if count > 0:
        logger.debug("Bootstrap skipped: %d folders present", count)
        return None

    folder = await folder_service.create_folder(db, name)
    logger.info("Created default folder '%s' (%s)", folder.name, folder.id)
    return folder
