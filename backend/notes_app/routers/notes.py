"""Note API routes — every handler is scoped to the authenticated caller."""
import logging
import math
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from notes_app.database import get_db
from notes_app.dependencies import get_current_user
from notes_app.models.user import User
from notes_app.schemas.auth import MessageResponse
from notes_app.schemas.note import NoteCreate, NoteListResponse, NoteResponse, NoteUpdate, TagListResponse
from notes_app.services import note_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=NoteListResponse)
def list_notes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's notes, pinned first then newest first."""
    notes, total = note_service.list_notes(
        db, user.user_id, page=page, page_size=limit, search=search, tag=tag,
    )
    return NoteListResponse(
        notes=notes,
        total=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
    )


@router.get("/tags/all", response_model=TagListResponse)
def list_tags(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return TagListResponse(tags=note_service.list_tags(db, user.user_id))


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(note_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return NoteResponse(note=note_service.get_note(db, user.user_id, note_id))


@router.post("/", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(payload: NoteCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    note = note_service.create_note(
        db,
        user.user_id,
        title=payload.title,
        content=payload.content,
        tags=payload.tags,
        color=payload.color,
        is_pinned=payload.is_pinned,
    )
    return NoteResponse(message="Note created successfully", note=note)


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: str,
    payload: NoteUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update: only fields present in the body change."""
    note = note_service.update_note(db, user.user_id, note_id, payload.model_dump(exclude_unset=True))
    return NoteResponse(message="Note updated successfully", note=note)


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(note_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    note_service.delete_note(db, user.user_id, note_id)
    return MessageResponse(message="Note deleted successfully")
