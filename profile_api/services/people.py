"""Phone and address prefill from the Google People API.

Enrichment is best-effort: every failure is logged and turned into None so a
login never fails because of it.
"""
from dataclasses import dataclass

import httpx

from profile_api.config import settings
from profile_api.logging_config import get_logger
from profile_api.services.user_store import is_blank

logger = get_logger(__name__)


@dataclass(frozen=True)
class PeopleAddress:
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class PeopleProfile:
    phone_number: str | None = None
    address: PeopleAddress | None = None


def _first(items) -> dict | None:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def parse_people_response(data: dict) -> PeopleProfile:
    """Pick the first phone number and first address of a people/me payload."""
    phone = _first(data.get("phoneNumbers"))
    addr = _first(data.get("addresses"))
    address = None
    if addr is not None:
        country = addr.get("countryCode") or addr.get("country")
        address = PeopleAddress(
            line1=addr.get("streetAddress"),
            line2=addr.get("extendedAddress"),
            city=addr.get("city"),
            state=addr.get("region"),
            postal=addr.get("postalCode"),
            country=country.upper() if isinstance(country, str) else None,
        )
    return PeopleProfile(
        phone_number=phone.get("value") if phone else None,
        address=address,
    )


class PeopleClient:
    def __init__(
        self,
        url: str = settings.people_api_url,
        timeout: float = settings.http_timeout,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def fetch(self, access_token: str | None) -> PeopleProfile | None:
        if not access_token:
            return None
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.get(
                    self.url, headers={"Authorization": f"Bearer {access_token}"}
                )
        except httpx.HTTPError as exc:
            logger.warning("People API request failed: %s", exc)
            return None
        if resp.status_code != 200:
            logger.warning("People API returned %d; skipping prefill", resp.status_code)
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.warning("People API returned a non-JSON body; skipping prefill")
            return None
        if not isinstance(data, dict):
            return None
        logger.debug("People API fields: %s", sorted(data))
        return parse_people_response(data)


# user column -> value getter on PeopleProfile
_PREFILL_SOURCES = (
    ("phone", lambda p: p.phone_number),
    ("address_line1", lambda p: p.address and p.address.line1),
    ("address_line2", lambda p: p.address and p.address.line2),
    ("address_city", lambda p: p.address and p.address.city),
    ("address_state", lambda p: p.address and p.address.state),
    ("address_postal", lambda p: p.address and p.address.postal),
    ("address_country", lambda p: p.address and p.address.country),
)


def build_prefill_updates(user: dict | None, people: PeopleProfile | None) -> dict:
    """Fields to fill from People data; values the user already has are kept."""
    if not user or not people:
        return {}
    updates = {}
    for field, source in _PREFILL_SOURCES:
        value = source(people)
        if value and is_blank(user.get(field)):
            updates[field] = value
    return updates
