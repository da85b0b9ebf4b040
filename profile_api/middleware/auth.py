"""Request dependencies: stores, external clients and the session cookie."""
from typing import Any

from fastapi import Cookie, Depends, HTTPException, status

from profile_api.config import settings
from profile_api.database import get_db, user_columns
from profile_api.errors import InvalidSession
from profile_api.services.identity import GoogleCredentialVerifier
from profile_api.services.people import PeopleClient
from profile_api.services.session import SESSION_COOKIE, verify_session
from profile_api.services.user_store import UserStore

_verifier: GoogleCredentialVerifier | None = None


def get_user_store(db=Depends(get_db)) -> UserStore:
    return UserStore(db, user_columns)


def get_credential_verifier() -> GoogleCredentialVerifier:
    """Shared verifier; it holds the HTTP transport used for certificate fetches."""
    global _verifier
    if _verifier is None:
        _verifier = GoogleCredentialVerifier(settings.google_client_id)
    return _verifier


def get_people_client() -> PeopleClient:
    return PeopleClient()


async def get_session_user_id(
    session: str | None = Cookie(default=None, alias=SESSION_COOKIE),
) -> Any:
    """User id from the session cookie. Raises 401 if missing, forged or expired."""
    try:
        return verify_session(session)
    except InvalidSession:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
