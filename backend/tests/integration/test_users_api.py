"""End-to-end tests for the ``/api/v1/users`` endpoints."""

from __future__ import annotations

import io
import os

import pytest

BASE = "/api/v1/users"


@pytest.fixture()
def api(app, session, media_store, denylist):
    """Client that never stores cookies, so each test chooses how tokens travel."""
    return app.test_client(use_cookies=False)


def _form(**overrides):
    data = {
        "fullname": "Grace Hopper",
        "email": "Grace@Example.com",
        "username": "grace",
        "password": "cobol-rules",
        "avatar": (io.BytesIO(b"\x89PNG avatar"), "avatar.png"),
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def _register(client, **overrides):
    return client.post(f"{BASE}/register", data=_form(**overrides), content_type="multipart/form-data")


def _login(client, username="grace", password="cobol-rules"):
    return client.post(f"{BASE}/login", json={"username": username, "password": password})


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _set_cookies(resp) -> list[str]:
    return resp.headers.getlist("Set-Cookie")


# ------------------------------------------------------------------ health


def test_healthcheck(api):
    resp = api.get("/api/v1/healthcheck")

    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"status": "ok", "db": "ok"}


def test_unknown_route_is_problem_json(api):
    resp = api.get("/api/v1/nope")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["detail"] == "Route '/api/v1/nope' not found"


def test_request_id_is_echoed(api):
    resp = api.get("/api/v1/healthcheck", headers={"X-Request-ID": "trace-42"})

    assert resp.headers["X-Request-ID"] == "trace-42"


# ------------------------------------------------------------ registration


def test_register_returns_sanitized_account(api, app, media_store):
    resp = _register(
        api, coverImage=(io.BytesIO(b"\x89PNG cover"), "cover.png")
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"] == "User registered successfully"
    account = body["data"]
    assert account["email"] == "grace@example.com"
    assert account["username"] == "grace"
    assert account["avatar"].startswith("https://media.local/")
    assert account["cover_image"].endswith(".png")
    assert "password_hash" not in account
    assert "refresh_token" not in account
    assert len(media_store.assets) == 2
    assert os.listdir(app.config["UPLOAD_TMP_DIR"]) == []


def test_register_requires_avatar(api, app, media_store):
    resp = _register(api, avatar=None, coverImage=(io.BytesIO(b"cover"), "cover.png"))

    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "Avatar file is required"
    assert media_store.uploads == []
    # the staged cover image is removed too
    assert os.listdir(app.config["UPLOAD_TMP_DIR"]) == []


def test_register_requires_all_fields(api):
    resp = _register(api, fullname=None)

    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "All fields are required"


def test_register_duplicate(api):
    assert _register(api).status_code == 201

    resp = _register(api, email="other@example.com")

    assert resp.status_code == 409
    assert resp.get_json()["detail"] == "User with email or username already exists"


def test_register_media_store_failure(api, media_store):
    media_store.fail_uploads_after = 0

    resp = _register(api)

    assert resp.status_code == 502
    assert resp.get_json()["code"] == "upload_failed"


# ------------------------------------------------------------------ login


def test_login_sets_http_only_cookies(api):
    _register(api)

    resp = _login(api)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["account"]["username"] == "grace"
    assert data["access_token"] and data["refresh_token"]
    cookies = _set_cookies(resp)
    assert any(c.startswith("accessToken=") and "HttpOnly" in c for c in cookies)
    assert any(c.startswith("refreshToken=") and "HttpOnly" in c for c in cookies)


def test_login_by_email(api):
    _register(api)

    resp = api.post(f"{BASE}/login", json={"email": "GRACE@example.com", "password": "cobol-rules"})

    assert resp.status_code == 200


def test_login_wrong_password(api):
    _register(api)

    resp = _login(api, password="fortran")

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid credentials"


def test_login_unknown_user(api):
    resp = _login(api, username="nobody")

    assert resp.status_code == 404
    assert resp.get_json()["detail"] == "User does not exist"


# ------------------------------------------------------------ current user


def test_current_user_with_bearer(api):
    _register(api)
    token = _login(api).get_json()["data"]["access_token"]

    resp = api.get(f"{BASE}/current-user", headers=_bearer(token))

    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "grace"


def test_current_user_with_cookie(app, session, media_store, denylist):
    client = app.test_client()
    _register(client)
    _login(client)  # cookies are kept by the client

    resp = client.get(f"{BASE}/current-user")

    assert resp.status_code == 200


def test_current_user_requires_token(api):
    resp = api.get(f"{BASE}/current-user")

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Unauthorized request"


def test_current_user_rejects_garbage_token(api):
    resp = api.get(f"{BASE}/current-user", headers=_bearer("not-a-jwt"))

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "token_invalid"


def test_refresh_token_is_not_an_access_token(api):
    _register(api)
    refresh = _login(api).get_json()["data"]["refresh_token"]

    resp = api.get(f"{BASE}/current-user", headers=_bearer(refresh))

    assert resp.status_code == 401


# ----------------------------------------------------------------- refresh


def test_refresh_rotates_tokens(api):
    _register(api)
    first = _login(api).get_json()["data"]

    resp = api.post(f"{BASE}/refresh-token", json={"refreshToken": first["refresh_token"]})

    assert resp.status_code == 200
    pair = resp.get_json()["data"]
    assert pair["refresh_token"] != first["refresh_token"]
    assert any(c.startswith("refreshToken=") for c in _set_cookies(resp))

    reused = api.post(f"{BASE}/refresh-token", json={"refresh_token": first["refresh_token"]})
    assert reused.status_code == 401
    assert reused.get_json()["detail"] == "Refresh token is expired or used"


def test_refresh_from_cookie(app, session, media_store, denylist):
    client = app.test_client()
    _register(client)
    _login(client)

    resp = client.post(f"{BASE}/refresh-token")

    assert resp.status_code == 200


def test_refresh_without_token(api):
    resp = api.post(f"{BASE}/refresh-token", json={})

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Unauthorized request"


# ------------------------------------------------------------------ logout


def test_logout_revokes_tokens(api):
    _register(api)
    tokens = _login(api).get_json()["data"]

    resp = api.post(f"{BASE}/logout", headers=_bearer(tokens["access_token"]))

    assert resp.status_code == 200
    cleared = _set_cookies(resp)
    assert any(c.startswith("accessToken=;") for c in cleared)
    assert any(c.startswith("refreshToken=;") for c in cleared)

    again = api.get(f"{BASE}/current-user", headers=_bearer(tokens["access_token"]))
    assert again.status_code == 401
    assert again.get_json()["code"] == "token_revoked"

    refreshed = api.post(f"{BASE}/refresh-token", json={"refreshToken": tokens["refresh_token"]})
    assert refreshed.status_code == 401


def test_login_after_logout_issues_working_tokens(api):
    _register(api)
    old = _login(api).get_json()["data"]
    assert api.post(f"{BASE}/logout", headers=_bearer(old["access_token"])).status_code == 200

    new = _login(api).get_json()["data"]

    me = api.get(f"{BASE}/current-user", headers=_bearer(new["access_token"]))
    assert me.status_code == 200
    assert me.get_json()["data"]["username"] == "grace"

    stale = api.post(f"{BASE}/refresh-token", json={"refresh_token": old["refresh_token"]})
    assert stale.status_code == 401

    rotated = api.post(f"{BASE}/refresh-token", json={"refresh_token": new["refresh_token"]})
    assert rotated.status_code == 200
    assert api.get(f"{BASE}/current-user", headers=_bearer(old["access_token"])).status_code == 401


# --------------------------------------------------------- password & media


def test_change_password(api):
    _register(api)
    token = _login(api).get_json()["data"]["access_token"]

    resp = api.post(
        f"{BASE}/change-password",
        json={"old_password": "cobol-rules", "new_password": "lisp-forever"},
        headers=_bearer(token),
    )

    assert resp.status_code == 200
    assert _login(api, password="lisp-forever").status_code == 200
    assert _login(api).status_code == 401


def test_change_password_wrong_old(api):
    _register(api)
    token = _login(api).get_json()["data"]["access_token"]

    resp = api.post(
        f"{BASE}/change-password",
        json={"old_password": "nope", "new_password": "lisp-forever"},
        headers=_bearer(token),
    )

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid old password"


def test_update_avatar(api, media_store):
    original = _register(api).get_json()["data"]["avatar"]
    token = _login(api).get_json()["data"]["access_token"]

    resp = api.patch(
        f"{BASE}/avatar",
        data={"avatar": (io.BytesIO(b"\x89PNG new"), "new.png")},
        content_type="multipart/form-data",
        headers=_bearer(token),
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["avatar"] not in ("", original)
    # the previous asset is kept
    assert media_store.deletes == []


def test_update_avatar_without_file(api):
    _register(api)
    token = _login(api).get_json()["data"]["access_token"]

    resp = api.patch(f"{BASE}/avatar", headers=_bearer(token))

    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "Avatar file is missing"


def test_update_cover_image(api):
    _register(api)
    token = _login(api).get_json()["data"]["access_token"]

    resp = api.patch(
        f"{BASE}/cover-image",
        data={"coverImage": (io.BytesIO(b"\x89PNG cover"), "cover.jpg")},
        content_type="multipart/form-data",
        headers=_bearer(token),
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["cover_image"].endswith(".jpg")


def test_media_routes_require_auth(api):
    assert api.patch(f"{BASE}/avatar").status_code == 401
    assert api.patch(f"{BASE}/cover-image").status_code == 401
