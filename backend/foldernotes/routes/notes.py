"""
FolderNotes Backend — Notes Route Handlers
===========================================

What:  Note CRUD and attachment endpoints.
How:   Extracts path/body data, delegates to NoteService, returns JSON.
Who:   Called by the frontend note list and editor.

Endpoints:
    GET    /api/folders/{folder_id}/notes
    GET    /api/notes
    POST   /api/notes
    PUT    /api/notes/{note_id}
    DELETE /api/notes/{note_id}
    POST   /api/notes/{note_id}/files
    DELETE /api/notes/{note_id}/files/{file_id}

Missing notes on update and on the file endpoints surface as 404 via the
NotFoundError handler; everything else that fails is a 500.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foldernotes.database import get_db_session
from foldernotes.schemas.common import ErrorResponse, SuccessResponse
from foldernotes.schemas.note import (
    FileAttachRequest,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from foldernotes.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}
STORE_ERROR = {500: {"description": "Store error", "model": ErrorResponse}}


@router.get(
    "/folders/{folder_id}/notes",
    response_model=List[NoteResponse],
    responses=STORE_ERROR,
    summary="List the notes of one folder, most recently updated first",
)
async def list_folder_notes(
    folder_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    return await note_service.list_notes(db, folder_id=folder_id)


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses=STORE_ERROR,
    summary="List every note, most recently updated first",
)
async def list_notes(
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    return await note_service.list_notes(db)


@router.post(
    "/notes",
    response_model=NoteResponse,
    responses=STORE_ERROR,
    summary="Create a note",
)
async def create_note(
    body: NoteCreate,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.create_note(
        db,
        folder_id=body.folder_id,
        title=body.title,
        content=body.content,
    )


@router.put(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={**NOT_FOUND, **STORE_ERROR},
    summary="Replace a note's title, content and files",
)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.update_note(db, note_id, body)


@router.delete(
    "/notes/{note_id}",
    response_model=SuccessResponse,
    responses=STORE_ERROR,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await note_service.delete_note(db, note_id)
    return SuccessResponse(success=True)


@router.post(
    "/notes/{note_id}/files",
    response_model=NoteResponse,
    responses={**NOT_FOUND, **STORE_ERROR},
    summary="Attach a base64 file to a note",
)
async def add_file(
    note_id: str,
    body: FileAttachRequest,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    logger.info(
        "Attaching file to note %s: name=%s, size=%s",
        note_id,
        body.file.name or "unknown",
        body.file.size,
    )
    return await note_service.add_file(db, note_id, body.file)


@router.delete(
    "/notes/{note_id}/files/{file_id}",
    response_model=NoteResponse,
    responses={**NOT_FOUND, **STORE_ERROR},
    summary="Remove a file from a note",
)
async def remove_file(
    note_id: str,
    file_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.remove_file(db, note_id, file_id)
