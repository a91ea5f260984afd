"""FastAPI dependencies — builds the auth collaborators once from settings and resolves bearer tokens.

Tests swap any of these through ``app.dependency_overrides``.
"""
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from notes_app.config import settings
from notes_app.database import get_db
from notes_app.errors import Unauthenticated
from notes_app.models.user import User
from notes_app.services import user_service
from notes_app.services.auth_service import AuthService
from notes_app.services.notifier import LoggingNotifier, Notifier, SMTPNotifier
from notes_app.services.oauth_provider import GoogleIdentityProvider
from notes_app.services.otp_service import OTPService
from notes_app.services.token_service import TokenService
from notes_app.timeutils import utcnow

bearer_scheme = HTTPBearer(auto_error=False)


def get_clock():
    return utcnow


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        lifetime=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )


@lru_cache
def get_notifier() -> Notifier:
    if not settings.SMTP_HOST:
        return LoggingNotifier()
    return SMTPNotifier(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        sender=settings.EMAIL_FROM,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        expire_minutes=settings.OTP_EXPIRE_MINUTES,
    )


@lru_cache
def get_identity_provider() -> Optional[GoogleIdentityProvider]:
    """Return the Google provider, or None when OAuth credentials are not configured."""
    if not (settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET):
        return None
    return GoogleIdentityProvider(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=f"{settings.BACKEND_URL.rstrip('/')}/api/auth/google/callback",
    )


def get_otp_service(clock=Depends(get_clock)) -> OTPService:
    return OTPService(
        expire_minutes=settings.OTP_EXPIRE_MINUTES,
        resend_cooldown_seconds=settings.OTP_RESEND_COOLDOWN_SECONDS,
        failed_send_cooldown_seconds=settings.OTP_FAILED_SEND_COOLDOWN_SECONDS,
        clock=clock,
    )


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    otp: OTPService = Depends(get_otp_service),
    notifier: Notifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(db=db, tokens=tokens, otp=otp, notifier=notifier)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> str:
    """Resolve the ``Authorization: Bearer`` header to a user id (401 otherwise)."""
    token = credentials.credentials if credentials else None
    return auth.resolve_request(token)


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """Like ``get_current_user_id`` but also requires the account to still exist."""
    user = user_service.find_by_id(db, user_id)
    if not user:
        raise Unauthenticated()
    return user
