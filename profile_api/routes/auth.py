"""Auth routes: Google sign-in and logout."""
from fastapi import APIRouter, Depends, HTTPException, Response, status

from profile_api.errors import (
    InvalidCredential,
    PersistenceFailure,
    SchemaError,
    UnverifiedEmail,
)
from profile_api.logging_config import get_logger
from profile_api.middleware.auth import (
    get_credential_verifier,
    get_people_client,
    get_user_store,
)
from profile_api.schemas.auth import GoogleLoginRequest, LogoutResponse
from profile_api.schemas.user import UserEnvelope
from profile_api.services.identity import GoogleCredentialVerifier
from profile_api.services.people import PeopleClient
from profile_api.services.profile import login_with_google
from profile_api.services.session import (
    clear_session_cookie,
    issue_session,
    set_session_cookie,
)
from profile_api.services.user_store import UserStore

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/google", response_model=UserEnvelope)
def google_login(
    response: Response,
    data: GoogleLoginRequest | None = None,
    store: UserStore = Depends(get_user_store),
    verifier: GoogleCredentialVerifier = Depends(get_credential_verifier),
    people: PeopleClient = Depends(get_people_client),
):
    """Exchange a Google ID token for a session cookie and the user record."""
    if data is None or not data.id_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing idToken")

    try:
        user = login_with_google(
            store, verifier, people, data.id_token, access_token=data.access_token
        )
    except (InvalidCredential, UnverifiedEmail) as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    except (SchemaError, PersistenceFailure) as e:
        logger.error("Google login failed: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed"
        )

    if not user or user.get("id") is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="User id missing after login",
        )

    set_session_cookie(response, issue_session(user["id"]))
    return {"user": user}


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response):
    clear_session_cookie(response)
    return {"ok": True}
