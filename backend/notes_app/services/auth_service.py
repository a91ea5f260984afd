"""Authentication gateway — registration, code verification, login, OAuth and request identity.

Per-user lifecycle::

    Unregistered --register--> PendingVerification --verify_otp--> Verified
    Unregistered --oauth_login----------------------------------> Verified

Only Verified users receive tokens from the password path. The OAuth path
trusts the identity provider's email verification. Linking it to a still
pending account drops that account's unproven password.
"""
import logging
from typing import NamedTuple, Optional

from sqlalchemy.orm import Session

from notes_app.errors import (
    InvalidCode,
    InvalidCredentials,
    InvalidToken,
    NotFound,
    NotifyFailed,
    NotVerified,
    OAuthFailed,
    Unauthenticated,
)
from notes_app.models.user import User
from notes_app.services import user_service
from notes_app.services.notifier import NotificationError, Notifier
from notes_app.services.oauth_provider import ExternalIdentity
from notes_app.services.otp_service import OTPService
from notes_app.services.token_service import TokenService

logger = logging.getLogger(__name__)


class AuthResult(NamedTuple):
    token: str
    user: User


class AuthService:
    def __init__(self, db: Session, tokens: TokenService, otp: OTPService, notifier: Notifier):
        self.db = db
        self.tokens = tokens
        self.otp = otp
        self.notifier = notifier

    def _deliver_code(self, user: User, code: str, failure_message: str) -> None:
        """Send ``code`` and start the resend cooldown.

        The code is already committed, so a failed send is reported without
        rolling anything back. A failed send only starts the short retry window.
        """
        try:
            self.notifier.send_otp(user.email, code)
        except NotificationError:
            logger.warning("Verification email for user %s was not delivered", user.user_id)
            self.otp.mark_send_failed(user)
            self.db.commit()
            raise NotifyFailed(failure_message, user_id=user.user_id)
        self.otp.mark_sent(user)
        self.db.commit()

    def register(self, name: str, email: str, password: str) -> User:
        user = user_service.create_user(self.db, name, email, password)
        code = self.otp.issue(user)
        self.db.commit()
        self._deliver_code(user, code, "User created but failed to send verification email")
        return user

    def verify_otp(self, email: str, code: str) -> AuthResult:
        user = user_service.find_by_email(self.db, email)
        if not user:
            raise NotFound("User not found")

        if not self.otp.verify(user, code):
            raise InvalidCode()

        user.is_email_verified = True
        self.db.commit()
        self.db.refresh(user)
        logger.info("Verified email for user %s", user.user_id)
        return AuthResult(self.tokens.issue(user.user_id), user)

    def resend_otp(self, email: str) -> None:
        user = user_service.find_by_email(self.db, email)
        if not user:
            raise NotFound("User not found")

        self.otp.check_resend_allowed(user)
        code = self.otp.issue(user)
        self.db.commit()
        self._deliver_code(user, code, "Failed to send OTP")

    def login(self, email: str, password: str) -> AuthResult:
        user = user_service.find_by_email(self.db, email)
        # Same error for unknown email and wrong password.
        if not user or not user_service.verify_password(user, password):
            raise InvalidCredentials()
        if not user.is_email_verified:
            raise NotVerified()

        logger.info("User %s logged in", user.user_id)
        return AuthResult(self.tokens.issue(user.user_id), user)

    def oauth_login(self, identity: ExternalIdentity) -> AuthResult:
        """Find-or-create the account behind ``identity`` and issue a token."""
        user = user_service.find_by_oauth_id(self.db, identity.subject)
        if user is None:
            user = user_service.find_by_email(self.db, identity.email)
            if user is not None:
                if user.oauth_id is not None:
                    logger.warning("Refused to relink user %s to a second OAuth identity", user.user_id)
                    raise OAuthFailed("Email is already linked to another sign-in")
                if not user.is_email_verified:
                    # A pending password was never proven to belong to the address owner.
                    user.password_hash = None
                user.oauth_id = identity.subject
                if not user.avatar:
                    user.avatar = identity.avatar
                user.is_email_verified = True
                user.otp_code = None
                user.otp_expires_at = None
                self.db.commit()
                self.db.refresh(user)
                logger.info("Linked OAuth identity to existing user %s", user.user_id)
            else:
                user = user_service.create_oauth_user(
                    self.db,
                    name=identity.name,
                    email=identity.email,
                    oauth_id=identity.subject,
                    avatar=identity.avatar,
                )
        return AuthResult(self.tokens.issue(user.user_id), user)

    def resolve_request(self, token: Optional[str]) -> str:
        """Map a bearer token to the caller's user id."""
        if not token:
            raise Unauthenticated()
        try:
            return self.tokens.verify(token)
        except InvalidToken as exc:
            raise Unauthenticated(exc.message)

    def current_user(self, user_id: str) -> User:
        user = user_service.find_by_id(self.db, user_id)
        if not user:
            raise NotFound("User not found")
        return user
