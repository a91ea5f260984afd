"""Outgoing verification mail.

``send_otp`` either returns or raises ``NotificationError``; whether a failed
send is fatal is the caller's decision.
"""
import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a message could not be handed to the mail server."""


class Notifier:
    def send_otp(self, email: str, code: str) -> None:
        raise NotImplementedError


class SMTPNotifier(Notifier):
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        expire_minutes: int = 10,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.expire_minutes = expire_minutes
        self.timeout = timeout

    def _build_message(self, email: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = "Your verification code"
        message["From"] = self.sender
        message["To"] = email
        message.set_content(
            f"Your verification code is {code}.\n\n"
            f"It expires in {self.expire_minutes} minutes. "
            "If you did not request it, you can ignore this email.\n"
        )
        return message

    def send_otp(self, email: str, code: str) -> None:
        message = self._build_message(email, code)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP delivery to %s failed: %s", email, exc)
            raise NotificationError(f"Failed to send email to {email}") from exc
        logger.info("Sent verification code to %s", email)


class LoggingNotifier(Notifier):
    """Development sender used when no SMTP host is configured."""

    def send_otp(self, email: str, code: str) -> None:
        logger.info("SMTP not configured; verification code for %s not emailed", email)
        logger.debug("Verification code for %s: %s", email, code)
