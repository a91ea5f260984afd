"""One-time-code lifecycle: issuance, expiry, single-use verification and resend cooldown.

A user holds at most one pending code. Issuing a new one overwrites the code
and its deadline in a single row update, so the last issuance wins. The
caller owns the transaction and commits after each call that mutates the user.
"""
import logging
import math
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from notes_app.errors import ResendTooSoon
from notes_app.models.user import User
from notes_app.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class OTPService:
    def __init__(
        self,
        expire_minutes: int = 10,
        resend_cooldown_seconds: int = 60,
        failed_send_cooldown_seconds: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.lifetime = timedelta(minutes=expire_minutes)
        self.resend_cooldown = timedelta(seconds=resend_cooldown_seconds)
        self.failed_send_cooldown = timedelta(seconds=failed_send_cooldown_seconds)
        self._clock = clock

    @staticmethod
    def generate_code() -> str:
        return f"{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}"

    def issue(self, user: User) -> str:
        """Replace any pending code for ``user`` and return the new one."""
        code = self.generate_code()
        user.otp_code = code
        user.otp_expires_at = self._clock() + self.lifetime
        logger.info("Issued one-time code for user %s", user.user_id)
        return code

    def mark_sent(self, user: User) -> None:
        """Start the full resend cooldown after a delivered code."""
        user.otp_last_sent_at = self._clock()
        user.otp_send_failed_at = None

    def mark_send_failed(self, user: User) -> None:
        """Start the shorter retry window after a delivery failure."""
        user.otp_send_failed_at = self._clock()

    def verify(self, user: User, submitted: str) -> bool:
        """Consume the pending code if ``submitted`` matches and has not expired.

        A failed attempt leaves the pending code in place so the user can
        retry until the deadline.
        """
        expires_at = as_utc(user.otp_expires_at)
        if not user.otp_code or expires_at is None:
            return False
        if self._clock() >= expires_at:
            logger.info("Rejected expired one-time code for user %s", user.user_id)
            return False
        if not secrets.compare_digest(user.otp_code.encode(), submitted.encode()):
            return False

        user.otp_code = None
        user.otp_expires_at = None
        return True

    def _remaining(self, since: Optional[datetime], window: timedelta) -> int:
        since = as_utc(since)
        if since is None:
            return 0
        return max(0, math.ceil((since + window - self._clock()).total_seconds()))

    def seconds_until_resend(self, user: User) -> int:
        return max(
            self._remaining(user.otp_last_sent_at, self.resend_cooldown),
            self._remaining(user.otp_send_failed_at, self.failed_send_cooldown),
        )

    def check_resend_allowed(self, user: User) -> None:
        retry_after = self.seconds_until_resend(user)
        if retry_after > 0:
            raise ResendTooSoon(
                f"Please wait {retry_after}s before requesting another code",
                retry_after=retry_after,
            )
