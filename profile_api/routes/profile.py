"""Current-user routes: read and edit the signed-in profile."""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from profile_api.errors import PersistenceFailure, SchemaError
from profile_api.logging_config import get_logger
from profile_api.middleware.auth import get_session_user_id, get_user_store
from profile_api.schemas.user import ProfileUpdate, UserEnvelope
from profile_api.services.user_store import UserStore

logger = get_logger(__name__)

router = APIRouter(tags=["profile"])


def _session_user_missing() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="Session user missing"
    )


@router.get("/me", response_model=UserEnvelope)
def me(
    user_id: Any = Depends(get_session_user_id),
    store: UserStore = Depends(get_user_store),
):
    try:
        user = store.find_by_id(user_id)
    except (SchemaError, PersistenceFailure) as e:
        logger.error("Loading session user failed: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not load user",
        )
    if not user:
        raise _session_user_missing()
    return {"user": user}


@router.post("/profile", response_model=UserEnvelope)
def update_profile(
    data: ProfileUpdate | None = None,
    user_id: Any = Depends(get_session_user_id),
    store: UserStore = Depends(get_user_store),
):
    """Persist the fields sent by the profile editor. Unknown columns are skipped."""
    fields = data.model_dump(exclude_none=True) if data else {}
    try:
        user = store.update_profile(user_id, fields)
    except (SchemaError, PersistenceFailure) as e:
        logger.error("Profile update failed: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Profile update failed"
        )
    if not user:
        raise _session_user_missing()
    return {"user": user}
