"""User ORM model — credentials, verification state and pending one-time code."""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func
from notes_app.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)  # always lower-cased
    password_hash = Column(String(255), nullable=True)  # NULL for OAuth-only accounts
    is_email_verified = Column(Boolean, nullable=False, default=False)
    otp_code = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    otp_last_sent_at = Column(DateTime(timezone=True), nullable=True)
    otp_send_failed_at = Column(DateTime(timezone=True), nullable=True)
    avatar = Column(String(1024), nullable=True)
    oauth_id = Column(String(255), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
