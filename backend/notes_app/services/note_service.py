"""Note repository — owner-scoped CRUD, search, tag filtering and pagination.

Every query filters on ``author_id`` first. A note owned by someone else is
reported exactly like a missing one, so callers cannot probe for ids.
"""
import logging
from typing import Any, Optional

from sqlalchemy import String, func, or_
from sqlalchemy.orm import Session

from notes_app.errors import NotFound, ValidationError
from notes_app.models.note import DEFAULT_NOTE_COLOR, Note, NoteTag
from notes_app.timeutils import utcnow

logger = logging.getLogger(__name__)

TITLE_MAX = 200
CONTENT_MAX = 10000
TAG_MAX = 100
COLOR_MAX = 32

UPDATABLE_FIELDS = ("title", "content", "tags", "color", "is_pinned")


def _clean_title(title: Any) -> str:
    if not isinstance(title, str):
        raise ValidationError("Title must be a string")
    title = title.strip()
    if not 1 <= len(title) <= TITLE_MAX:
        raise ValidationError(f"Title must be between 1 and {TITLE_MAX} characters")
    return title


def _clean_content(content: Any) -> str:
    if not isinstance(content, str):
        raise ValidationError("Content must be a string")
    if not 1 <= len(content) <= CONTENT_MAX:
        raise ValidationError(f"Content must be between 1 and {CONTENT_MAX} characters")
    return content


def _clean_tags(tags: Optional[list[str]]) -> list[str]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order."""
    cleaned: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if not tag or tag in cleaned:
            continue
        if len(tag) > TAG_MAX:
            raise ValidationError(f"Tags must be at most {TAG_MAX} characters")
        cleaned.append(tag)
    return cleaned


def _clean_color(color: Any) -> str:
    if not isinstance(color, str) or not color.strip():
        raise ValidationError("Color must be a non-empty string")
    color = color.strip()
    if len(color) > COLOR_MAX:
        raise ValidationError(f"Color must be at most {COLOR_MAX} characters")
    return color


def _set_tags(note: Note, tags: list[str]) -> None:
    note.tag_links = [NoteTag(position=i, tag=tag) for i, tag in enumerate(tags)]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _matches_search(db: Session, search: str):
    """Case-insensitive literal substring match on title or content."""
    if db.get_bind().dialect.name == "sqlite":
        # casefold() is registered on every SQLite connection in notes_app.database.
        pattern = f"%{_escape_like(search.casefold())}%"
        return or_(
            func.casefold(Note.title, type_=String).like(pattern, escape="\\"),
            func.casefold(Note.content, type_=String).like(pattern, escape="\\"),
        )
    pattern = f"%{_escape_like(search)}%"
    return or_(
        Note.title.ilike(pattern, escape="\\"),
        Note.content.ilike(pattern, escape="\\"),
    )


def _owned(db: Session, owner_id: str):
    return db.query(Note).filter(Note.author_id == owner_id)


def list_notes(
    db: Session,
    owner_id: str,
    page: int = 1,
    page_size: int = 10,
    search: Optional[str] = None,
    tag: Optional[str] = None,
) -> tuple[list[Note], int]:
    """Return one page of the owner's notes, pinned first then newest first, plus the total."""
    if page < 1 or page_size < 1:
        raise ValidationError("Page and page size must be positive")

    query = _owned(db, owner_id)
    if search:
        query = query.filter(_matches_search(db, search))
    if tag:
        query = query.filter(Note.tag_links.any(NoteTag.tag == tag.strip()))

    total = query.count()
    notes = (
        query.order_by(Note.is_pinned.desc(), Note.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return notes, total


def get_note(db: Session, owner_id: str, note_id: str) -> Note:
    note = _owned(db, owner_id).filter(Note.note_id == note_id).first()
    if not note:
        raise NotFound("Note not found")
    return note


def create_note(
    db: Session,
    owner_id: str,
    title: str,
    content: str,
    tags: Optional[list[str]] = None,
    color: Optional[str] = None,
    is_pinned: Optional[bool] = None,
) -> Note:
    note = Note(
        author_id=owner_id,
        title=_clean_title(title),
        content=_clean_content(content),
        color=_clean_color(color) if color is not None else DEFAULT_NOTE_COLOR,
        is_pinned=bool(is_pinned),
    )
    _set_tags(note, _clean_tags(tags))
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info("Created note %s for user %s", note.note_id, owner_id)
    return note


def update_note(db: Session, owner_id: str, note_id: str, changes: dict[str, Any]) -> Note:
    """Apply a partial update; keys absent from ``changes`` are left alone."""
    note = get_note(db, owner_id, note_id)

    # Validate everything before touching the row.
    cleaned: dict[str, Any] = {}
    for field, value in changes.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if field == "tags":
            cleaned[field] = _clean_tags(value)
        elif value is None:
            raise ValidationError(f"{field} cannot be null")
        elif field == "title":
            cleaned[field] = _clean_title(value)
        elif field == "content":
            cleaned[field] = _clean_content(value)
        elif field == "color":
            cleaned[field] = _clean_color(value)
        else:
            cleaned[field] = bool(value)

    for field, value in cleaned.items():
        if field == "tags":
            _set_tags(note, value)
        else:
            setattr(note, field, value)
    note.updated_at = utcnow()

    db.commit()
    db.refresh(note)
    logger.info("Updated note %s", note_id)
    return note


def delete_note(db: Session, owner_id: str, note_id: str) -> None:
    note = get_note(db, owner_id, note_id)
    db.delete(note)
    db.commit()
    logger.info("Deleted note %s", note_id)


def list_tags(db: Session, owner_id: str) -> list[str]:
    rows = (
        db.query(NoteTag.tag)
        .join(Note, Note.note_id == NoteTag.note_id)
        .filter(Note.author_id == owner_id)
        .distinct()
        .order_by(NoteTag.tag)
        .all()
    )
    return [row[0] for row in rows]
