"""Bearer token issuance and verification (signed JWTs, stateless)."""
import logging
from datetime import datetime, timedelta
from typing import Callable

from jose import JWTError, jwt

from notes_app.errors import InvalidToken
from notes_app.timeutils import utcnow

logger = logging.getLogger(__name__)


class TokenService:
    """Signs ``{sub, iat, exp}`` claims with a server-held secret.

    There is no revocation list: a token is valid until ``exp`` and logout is
    a client-side discard.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    def issue(self, user_id: str) -> str:
        now = self._clock()
        claims = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the user id bound to ``token`` or raise ``InvalidToken``."""
        try:
            # Expiry is checked below against the injected clock.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise InvalidToken()

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or self._clock().timestamp() >= exp:
            raise InvalidToken("Token has expired")

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        return user_id
