"""Google OAuth 2.0 authorization-code flow.

The provider is treated as an opaque authority: given the code from the
callback it returns an ``ExternalIdentity`` with a verified email, or raises
``OAuthError``.
"""
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """The provider refused the code or returned an unusable profile."""


class ExternalIdentity(BaseModel):
    subject: str
    email: str
    name: str
    avatar: Optional[str] = None


class GoogleIdentityProvider:
    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES = ("openid", "email", "profile")

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "state": state,
            "prompt": "select_account",
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    def fetch_identity(self, code: str) -> ExternalIdentity:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                token_resp = client.post(self.TOKEN_URL, data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                })
                token_resp.raise_for_status()
                access_token = token_resp.json().get("access_token")
                if not access_token:
                    raise OAuthError("Token response did not include an access token")

                info_resp = client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                info_resp.raise_for_status()
                profile = info_resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Google OAuth exchange failed: %s", exc)
            raise OAuthError("Could not reach the identity provider") from exc

        if not profile.get("sub") or not profile.get("email"):
            raise OAuthError("Identity provider returned an incomplete profile")
        if profile.get("email_verified") is False:
            raise OAuthError("Identity provider has not verified this email")

        return ExternalIdentity(
            subject=str(profile["sub"]),
            email=profile["email"],
            name=profile.get("name") or profile["email"].split("@")[0],
            avatar=profile.get("picture"),
        )
