"""Note and NoteTag ORM models."""
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from notes_app.database import Base
from notes_app.timeutils import utcnow

DEFAULT_NOTE_COLOR = "#ffffff"


class Note(Base):
    __tablename__ = "notes"

    note_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    is_pinned = Column(Boolean, nullable=False, default=False)
    color = Column(String(32), nullable=False, default=DEFAULT_NOTE_COLOR)
    # Application-side timestamps keep microseconds, so newest-first ordering is stable on SQLite too.
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    author = relationship("User", lazy="joined")
    tag_links = relationship(
        "NoteTag",
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="NoteTag.position",
    )

    @property
    def tags(self) -> list[str]:
        return [link.tag for link in self.tag_links]


class NoteTag(Base):
    __tablename__ = "note_tags"

    tag_link_id = Column(Integer, primary_key=True, autoincrement=True)
    note_id = Column(String(36), ForeignKey("notes.note_id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    tag = Column(String(100), nullable=False, index=True)

    note = relationship("Note", back_populates="tag_links")
