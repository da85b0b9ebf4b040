"""Google sign-in flow: verify, find-or-create, prefill."""
import re

from profile_api.logging_config import get_logger
from profile_api.services.identity import GoogleCredentialVerifier
from profile_api.services.people import PeopleClient, build_prefill_updates
from profile_api.services.user_store import UserStore

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def derive_username(name: str | None, email: str | None) -> str | None:
    """Default username: the name without whitespace, else the email local part."""
    full_name = (name or "").strip()
    if full_name:
        return _WHITESPACE.sub("", full_name.lower())
    email = (email or "").strip()
    if not email:
        return None
    return email.split("@")[0] or None


def login_with_google(
    store: UserStore,
    verifier: GoogleCredentialVerifier,
    people: PeopleClient,
    id_token: str,
    access_token: str | None = None,
) -> dict | None:
    """Exchange a verified Google identity for the stored user record.

    Raises InvalidCredential / UnverifiedEmail before any row is touched.
    """
    claims = verifier.verify(id_token)
    user = store.upsert_from_identity(
        email=claims.email,
        name=claims.name,
        picture=claims.picture,
        external_id=claims.subject,
        default_username=derive_username(claims.name, claims.email),
    )
    if not user or user.get("id") is None or not access_token:
        return user

    updates = build_prefill_updates(user, people.fetch(access_token))
    if updates:
        logger.info("Prefilling %s for user %s", ", ".join(sorted(updates)), user["id"])
        user = store.update_profile(user["id"], updates) or user
    return user
