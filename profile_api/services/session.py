"""Session tokens: signed JWTs carried in an HTTP-only cookie.

There is no server-side session store. A token stays valid until it expires
or the signing secret is rotated.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from starlette.responses import Response

from profile_api.config import settings
from profile_api.errors import InvalidSession

SESSION_COOKIE = "session"


def issue_session(user_id: Any, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(days=settings.session_ttl_days))
    payload = {"sub": str(user_id), "uid": user_id, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.app_jwt_secret, algorithm=settings.jwt_algorithm)


def verify_session(token: str | None) -> Any:
    """Return the user id embedded in a session token.

    Raises InvalidSession for a missing, malformed, forged or expired token.
    """
    if not token:
        raise InvalidSession()
    try:
        payload = jwt.decode(
            token, settings.app_jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        raise InvalidSession(str(exc)) from exc
    user_id = payload.get("uid")
    if user_id is None:
        raise InvalidSession("Session token has no user id")
    return user_id


def _cookie_kwargs() -> dict:
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": settings.is_production,
        "path": "/",
    }


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE, token, max_age=settings.session_max_age, **_cookie_kwargs()
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, **_cookie_kwargs())
