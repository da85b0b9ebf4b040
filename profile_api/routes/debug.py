"""Debug endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from profile_api.errors import PersistenceFailure
from profile_api.logging_config import get_logger
from profile_api.middleware.auth import get_user_store
from profile_api.schemas.common import SchemaColumns
from profile_api.services.user_store import UserStore

logger = get_logger(__name__)

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/schema", response_model=SchemaColumns)
def schema_columns(store: UserStore = Depends(get_user_store)):
    """Columns detected on the users table, to confirm migrations reached this database."""
    try:
        columns = store.discover_columns()
    except PersistenceFailure as e:
        logger.error("Schema debug failed: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Schema debug failed",
        )
    return {"columns": sorted(columns)}
