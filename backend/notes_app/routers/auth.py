"""Authentication API routes — email/password with one-time codes, plus Google OAuth."""
import logging
import secrets
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from notes_app.config import settings
from notes_app.dependencies import get_auth_service, get_current_user_id, get_identity_provider
from notes_app.errors import OAuthFailed, OAuthNotConfigured
from notes_app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOTPRequest,
    VerifyOTPRequest,
)
from notes_app.services.auth_service import AuthService
from notes_app.services.oauth_provider import GoogleIdentityProvider, OAuthError

logger = logging.getLogger(__name__)
router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"


def _frontend_url(path: str, **params: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}?{urlencode(params)}"


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Create an unverified account and email a one-time code."""
    user = auth.register(payload.name, payload.email, payload.password)
    return RegisterResponse(
        message="User created successfully. Please verify your email with the OTP sent.",
        user_id=user.user_id,
    )


@router.post("/verify-otp", response_model=AuthResponse)
def verify_otp(payload: VerifyOTPRequest, auth: AuthService = Depends(get_auth_service)):
    """Confirm email ownership and sign the user in."""
    result = auth.verify_otp(payload.email, payload.otp)
    return AuthResponse(message="Email verified successfully", token=result.token, user=result.user)


@router.post("/resend-otp", response_model=MessageResponse)
def resend_otp(payload: ResendOTPRequest, auth: AuthService = Depends(get_auth_service)):
    """Issue a fresh code, replacing any pending one."""
    auth.resend_otp(payload.email)
    return MessageResponse(message="OTP sent successfully")


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.login(payload.email, payload.password)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.post("/logout", response_model=MessageResponse)
def logout(user_id: str = Depends(get_current_user_id)):
    """Tokens are stateless; the client discards its copy."""
    logger.info("User %s logged out", user_id)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
def me(user_id: str = Depends(get_current_user_id), auth: AuthService = Depends(get_auth_service)):
    return MeResponse(user=auth.current_user(user_id))


@router.get("/google")
def google_login(provider: Optional[GoogleIdentityProvider] = Depends(get_identity_provider)):
    """Redirect to Google's consent screen with a CSRF state cookie."""
    if provider is None:
        raise OAuthNotConfigured()
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(provider.authorization_url(state))
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=600,
        httponly=True,
        secure=settings.BACKEND_URL.startswith("https"),
        samesite="lax",
    )
    return response


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    provider: Optional[GoogleIdentityProvider] = Depends(get_identity_provider),
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange the provider code, sign the user in and hand the token to the frontend."""
    if provider is None:
        raise OAuthNotConfigured()

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("OAuth callback rejected: missing code or state mismatch")
        response = RedirectResponse(_frontend_url("/login", error="oauth_failed"))
    else:
        try:
            result = auth.oauth_login(provider.fetch_identity(code))
        except (OAuthError, OAuthFailed) as exc:
            logger.warning("OAuth callback failed: %s", exc)
            response = RedirectResponse(_frontend_url("/login", error="oauth_failed"))
        else:
            logger.info("OAuth sign-in for user %s", result.user.user_id)
            response = RedirectResponse(_frontend_url("/auth/callback", token=result.token))

    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response
