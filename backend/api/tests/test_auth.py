import time

import jwt
import pytest

from archive_cms import messages
from archive_cms.auth import (
    ARCHIVES_WRITE,
    CONTENT_DELETE,
    AuthSecurityError,
    Principal,
    build_access_token,
    decode_access_token,
    jwt_algorithm,
    jwt_secret,
)


def test_token_round_trip():
    token = build_access_token(subject="someone@example.org", role="admin")
    payload = decode_access_token(token)
    assert payload["sub"] == "someone@example.org"
    assert payload["role"] == "admin"
    assert payload["type"] == "access"


def test_tampered_token_is_rejected():
    token = jwt.encode({"sub": "x", "role": "admin", "type": "access"}, "some-other-secret", algorithm="HS256")
    with pytest.raises(AuthSecurityError):
        decode_access_token(token)


def test_expired_token_is_rejected():
    now = int(time.time())
    token = jwt.encode(
        {"sub": "x", "role": "admin", "type": "access", "iat": now - 120, "exp": now - 60},
        jwt_secret(),
        algorithm=jwt_algorithm(),
    )
    with pytest.raises(AuthSecurityError):
        decode_access_token(token)


def test_non_access_token_is_rejected():
    token = jwt.encode({"sub": "x", "role": "admin", "type": "refresh"}, jwt_secret(), algorithm=jwt_algorithm())
    with pytest.raises(AuthSecurityError):
        decode_access_token(token)


@pytest.mark.parametrize(
    "role, capability, allowed",
    [
        ("admin", ARCHIVES_WRITE, True),
        ("admin", CONTENT_DELETE, True),
        ("editor", ARCHIVES_WRITE, True),
        ("editor", CONTENT_DELETE, False),
        ("viewer", ARCHIVES_WRITE, False),
        ("", CONTENT_DELETE, False),
    ],
)
def test_role_capabilities(role, capability, allowed):
    assert Principal(subject="s", role=role, token="t").can(capability) is allowed


class TestArchiveMutationsRequireCapability:
    def test_missing_token_is_401(self, client, sample_archive):
        resp = client.post("/api/archives", json=sample_archive)
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "error": messages.LOGIN_REQUIRED}

    def test_malformed_header_is_401(self, client, sample_archive):
        resp = client.post("/api/archives", json=sample_archive, headers={"Authorization": "Token abc"})
        assert resp.status_code == 401
        assert resp.json()["error"] == messages.INVALID_TOKEN

    def test_invalid_token_is_401(self, client, sample_archive):
        resp = client.post("/api/archives", json=sample_archive, headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_viewer_is_403(self, client, viewer_headers, sample_archive):
        resp = client.post("/api/archives", json=sample_archive, headers=viewer_headers)
        assert resp.status_code == 403
        assert resp.json() == {"success": False, "error": messages.PERMISSION_DENIED}

    def test_viewer_cannot_update_or_delete(self, client, editor_headers, viewer_headers, sample_archive):
        created = client.post("/api/archives", json=sample_archive, headers=editor_headers).json()["data"]

        assert client.put(f"/api/archives/{created['id']}", json=sample_archive, headers=viewer_headers).status_code == 403
        assert client.delete(f"/api/archives/{created['id']}", headers=viewer_headers).status_code == 403
        assert client.get(f"/api/archives/{created['id']}").status_code == 200

    def test_admin_can_write(self, client, admin_headers, sample_archive):
        assert client.post("/api/archives", json=sample_archive, headers=admin_headers).status_code == 200

    def test_cookie_token_is_accepted(self, client, editor_token, sample_archive):
        client.cookies.set("access_token", editor_token)
        assert client.post("/api/archives", json=sample_archive).status_code == 200
