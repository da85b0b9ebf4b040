import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest
from google.auth import exceptions as google_exceptions

from profile_api.errors import InvalidCredential, UnverifiedEmail
from profile_api.services import identity
from profile_api.services.identity import GoogleCredentialVerifier, IdentityClaims
from tests.conftest import CLIENT_ID, google_claims


@pytest.fixture()
def verifier():
    return GoogleCredentialVerifier(CLIENT_ID)


def test_valid_token_yields_claims(verifier, google_tokens):
    google_tokens["tok"] = google_claims(picture="https://img/ada.png")

    claims = verifier.verify("tok")

    assert claims == IdentityClaims(
        subject="g-1",
        email="a@x.com",
        email_verified=True,
        name="Ada Lovelace",
        picture="https://img/ada.png",
    )


def test_malformed_token_is_invalid(verifier, google_tokens):
    with pytest.raises(InvalidCredential):
        verifier.verify("not-a-jwt")


def test_wrong_audience_is_invalid(verifier, google_tokens):
    google_tokens["tok"] = google_claims(aud="someone-else")

    with pytest.raises(InvalidCredential):
        verifier.verify("tok")


def test_google_auth_error_is_invalid(verifier, monkeypatch):
    def boom(*args, **kwargs):
        raise google_exceptions.TransportError("certs unavailable")

    monkeypatch.setattr(identity.id_token, "verify_oauth2_token", boom)

    with pytest.raises(InvalidCredential):
        verifier.verify("tok")


def test_unverified_email_is_refused(verifier, google_tokens):
    google_tokens["tok"] = google_claims(verified=False)

    with pytest.raises(UnverifiedEmail):
        verifier.verify("tok")


def test_string_email_verified_flag(verifier, google_tokens):
    google_tokens["yes"] = google_claims(verified="true")
    google_tokens["no"] = google_claims(verified="false")

    assert verifier.verify("yes").email_verified is True
    with pytest.raises(UnverifiedEmail):
        verifier.verify("no")


def test_token_without_email_is_invalid(verifier, google_tokens):
    google_tokens["tok"] = google_claims(email=None)

    with pytest.raises(InvalidCredential, match="No email"):
        verifier.verify("tok")


def test_blank_profile_claims_become_none(verifier, google_tokens):
    google_tokens["tok"] = google_claims(name="  ", picture="")

    claims = verifier.verify("tok")

    assert claims.name is None
    assert claims.picture is None


def test_unconfigured_client_id_refuses_tokens(google_tokens):
    google_tokens["tok"] = google_claims()

    with pytest.raises(InvalidCredential):
        GoogleCredentialVerifier("").verify("tok")


class _CertsHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        self.server.hits += 1
        body = json.dumps({"kid-1": "-----BEGIN CERTIFICATE-----"}).encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", self.server.cache_control)
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture()
def certs_server(monkeypatch):
    """Local stand-in for Google's certificate endpoint that counts fetches."""
    monkeypatch.setenv("NO_PROXY", "127.0.0.1")
    monkeypatch.setenv("no_proxy", "127.0.0.1")
    server = HTTPServer(("127.0.0.1", 0), _CertsHandler)
    server.hits = 0
    server.cache_control = "public, max-age=3600"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    certs_url = f"http://127.0.0.1:{server.server_port}/oauth2/v1/certs"
    monkeypatch.setattr(identity.id_token, "_GOOGLE_OAUTH2_CERTS_URL", certs_url)
    monkeypatch.setattr(
        identity.id_token.jwt, "decode", lambda token, certs=None, **kwargs: google_claims()
    )

    yield server

    server.shutdown()
    server.server_close()


@pytest.mark.parametrize(
    "cache_control, fetches",
    [("public, max-age=3600", 1), ("no-store", 2)],
)
def test_certificates_are_cached_between_verifications(certs_server, cache_control, fetches):
    certs_server.cache_control = cache_control
    verifier = GoogleCredentialVerifier(CLIENT_ID)

    assert verifier.verify("first").email == "a@x.com"
    assert verifier.verify("second").email == "a@x.com"

    assert certs_server.hits == fetches
