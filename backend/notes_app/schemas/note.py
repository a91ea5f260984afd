"""Pydantic schemas for Notes.

Length bounds are enforced by ``note_service`` so they hold for every caller,
not only HTTP requests.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class NoteCreate(BaseModel):
    title: str
    content: str
    tags: Optional[list[str]] = None
    color: Optional[str] = None
    is_pinned: Optional[bool] = None


class NoteUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[list[str]] = None
    color: Optional[str] = None
    is_pinned: Optional[bool] = None


class AuthorOut(BaseModel):
    user_id: str
    name: str
    email: str

    model_config = {"from_attributes": True}


class NoteOut(BaseModel):
    note_id: str
    author_id: str
    author: AuthorOut
    title: str
    content: str
    tags: list[str] = []
    is_pinned: bool
    color: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NoteResponse(BaseModel):
    message: Optional[str] = None
    note: NoteOut


class NoteListResponse(BaseModel):
    notes: list[NoteOut]
    total: int
    total_pages: int
    current_page: int


class TagListResponse(BaseModel):
    tags: list[str]
