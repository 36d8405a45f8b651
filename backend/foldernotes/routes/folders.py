"""
FolderNotes Backend — Folder Route Handlers
============================================

What:  GET/POST /api/folders and DELETE /api/folders/{id}.
How:   Thin handlers: parse the request, call FolderService, return JSON.
Who:   Called by the frontend sidebar.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foldernotes.database import get_db_session
from foldernotes.schemas.common import ErrorResponse, SuccessResponse
from foldernotes.schemas.folder import FolderCreate, FolderResponse
from foldernotes.services.folder_service import folder_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Folders"])


@router.get(
    "/folders",
    response_model=List[FolderResponse],
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="List folders, oldest first",
)
async def list_folders(
    db: AsyncSession = Depends(get_db_session),
) -> List[FolderResponse]:
    return await folder_service.list_folders(db)


@router.post(
    "/folders",
    response_model=FolderResponse,
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="Create a folder",
)
async def create_folder(
    body: FolderCreate,
    db: AsyncSession = Depends(get_db_session),
) -> FolderResponse:
    return await folder_service.create_folder(db, body.name)


@router.delete(
    "/folders/{folder_id}",
    response_model=SuccessResponse,
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="Delete a folder and move its notes",
    description=(
        "Deletes the folder if it exists. Its notes are moved to the oldest "
        "remaining folder; if none remains they keep the old folder id. "
        "Always answers {success: true}."
    ),
)
async def delete_folder(
    folder_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await folder_service.delete_folder(db, folder_id)
    return SuccessResponse(success=True)
