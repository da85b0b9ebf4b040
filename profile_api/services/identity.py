"""Google ID token verification."""
from dataclasses import dataclass

import cachecontrol
import requests
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from profile_api.errors import InvalidCredential, UnverifiedEmail
from profile_api.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityClaims:
    subject: str | None
    email: str
    email_verified: bool
    name: str | None = None
    picture: str | None = None


def _clean(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class GoogleCredentialVerifier:
    """Checks signature, expiry, issuer and audience of a Google ID token.

    google-auth fetches Google's signing certificates on every verification, so
    the session is wrapped in CacheControl: the certificates are reused until the
    Cache-Control max-age Google sends expires, which follows key rotation.
    """

    def __init__(
        self,
        client_id: str,
        clock_skew_in_seconds: int = 10,
        session: requests.Session | None = None,
    ):
        self.client_id = client_id
        self.clock_skew_in_seconds = clock_skew_in_seconds
        self.session = session or cachecontrol.CacheControl(requests.Session())
        self._request = google_requests.Request(session=self.session)

    def verify(self, token: str) -> IdentityClaims:
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID is not configured; refusing ID token")
            raise InvalidCredential("Google sign-in is not configured")
        try:
            info = id_token.verify_oauth2_token(
                token,
                self._request,
                self.client_id,
                clock_skew_in_seconds=self.clock_skew_in_seconds,
            )
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            logger.info("Google ID token rejected: %s", exc)
            raise InvalidCredential() from exc

        email = _clean(info.get("email"))
        if not email:
            raise InvalidCredential("No email in token")
        # Google sends email_verified as a bool, older tokens as "true"
        verified = info.get("email_verified")
        if isinstance(verified, str):
            verified = verified.lower() == "true"
        if not verified:
            raise UnverifiedEmail()

        return IdentityClaims(
            subject=_clean(info.get("sub")),
            email=email,
            email_verified=True,
            name=_clean(info.get("name")),
            picture=_clean(info.get("picture")),
        )
