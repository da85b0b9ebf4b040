import os
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_JWT_SECRET", "test-secret")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("ENVIRONMENT", "test")

import profile_api.main as main  # noqa: E402  (import after env vars are set)
from profile_api.database import get_db, user_columns  # noqa: E402
from profile_api.middleware.auth import (  # noqa: E402
    get_credential_verifier,
    get_people_client,
)
from profile_api.services import identity  # noqa: E402
from profile_api.services.identity import GoogleCredentialVerifier  # noqa: E402
from profile_api.services.people import PeopleClient  # noqa: E402
from profile_api.services.user_store import (  # noqa: E402
    USER_FIELD_NAMES,
    ColumnCache,
    UserStore,
)

CLIENT_ID = "test-client-id"
PEOPLE_URL = "https://people.test/v1/people/me"

FULL_SCHEMA = USER_FIELD_NAMES
MINIMAL_SCHEMA = ("id", "email")

_COLUMN_DDL = {
    "id": "id INTEGER PRIMARY KEY AUTOINCREMENT",
    "email": "email TEXT NOT NULL UNIQUE",
    "google_sub": "google_sub TEXT UNIQUE",
    "role": "role TEXT NOT NULL DEFAULT 'user'",
}


def create_users_table(engine, columns, table_name="app_users"):
    """Create the users table with only the given columns.

    Entries containing a space are taken as raw column DDL.
    """
    ddl = ", ".join(
        c if " " in c else _COLUMN_DDL.get(c, f"{c} TEXT") for c in columns
    )
    with engine.begin() as conn:
        conn.execute(text(f"CREATE TABLE {table_name} ({ddl})"))


def count_users(engine) -> int:
    with engine.connect() as conn:
        return conn.execute(text("SELECT count(*) FROM app_users")).scalar()


def google_claims(email="a@x.com", name="Ada Lovelace", sub="g-1", verified=True, **extra):
    claims = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": sub,
        "email": email,
        "email_verified": verified,
        "name": name,
    }
    claims.update(extra)
    return claims


class PeopleStub:
    """Canned People API responses served through httpx.MockTransport."""

    def __init__(self):
        self.status_code = 404
        self.payload: dict = {}
        self.requests: list[httpx.Request] = []

    def respond(self, payload: dict, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def client(self) -> PeopleClient:
        return PeopleClient(url=PEOPLE_URL, timeout=5, transport=self.transport)


@pytest.fixture()
def users_schema():
    """Columns of app_users for the test; parametrize to use a partial schema."""
    return FULL_SCHEMA


@pytest.fixture()
def engine(users_schema):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if users_schema:
        create_users_table(engine, users_schema)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture()
def column_cache():
    return ColumnCache("app_users")


@pytest.fixture()
def store(db_session, column_cache):
    return UserStore(db_session, column_cache)


@pytest.fixture()
def google_tokens(monkeypatch):
    """Map of ID token string -> claims accepted by the patched Google verifier."""
    tokens: dict[str, dict] = {}

    def fake_verify(token, request, audience=None, clock_skew_in_seconds=0):
        if token not in tokens:
            raise ValueError("Wrong number of segments in token")
        claims = tokens[token]
        if audience != claims.get("aud"):
            raise ValueError("Token has wrong audience")
        return dict(claims)

    monkeypatch.setattr(identity.id_token, "verify_oauth2_token", fake_verify)
    return tokens


@pytest.fixture()
def people_stub():
    return PeopleStub()


@pytest.fixture()
def client(engine, google_tokens, people_stub):
    """TestClient wired to the per-test database, verifier and People stub."""
    TestingSession = sessionmaker(bind=engine, autoflush=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[get_credential_verifier] = lambda: GoogleCredentialVerifier(CLIENT_ID)
    main.app.dependency_overrides[get_people_client] = people_stub.client
    user_columns.invalidate()

    yield TestClient(main.app)

    main.app.dependency_overrides.clear()
    user_columns.invalidate()


@pytest.fixture()
def login(client, google_tokens):
    """Sign in through /auth/google and return the response."""

    def _login(email="a@x.com", name="Ada Lovelace", sub="g-1", access_token=None, **extra):
        token = f"id-token-for-{email}"
        google_tokens[token] = google_claims(email=email, name=name, sub=sub, **extra)
        body = {"idToken": token}
        if access_token:
            body["accessToken"] = access_token
        return client.post("/auth/google", json=body)

    return _login
