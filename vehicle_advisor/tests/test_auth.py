from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from vehicle_advisor.app import app
from vehicle_advisor.auth.dependencies import get_current_user, require_admin, require_user

client = TestClient(app)

USER = {"X-User-Id": "user-1"}
ADMIN = {"X-User-Id": "admin", "X-User-Role": "admin"}


# ── Header identity ──────────────────────────────────────────────────────


def test_current_user_from_headers():
    assert get_current_user("user-1", None) == {"user_id": "user-1", "role": "user"}
    assert get_current_user("admin", "admin") == {"user_id": "admin", "role": "admin"}


def test_no_identity():
    assert get_current_user(None, None) is None
    assert get_current_user("", "admin") is None


def test_require_user_raises_401():
    with pytest.raises(HTTPException) as exc_info:
        require_user(None, None)
    assert exc_info.value.status_code == 401


def test_require_admin_raises_403_for_users():
    with pytest.raises(HTTPException) as exc_info:
        require_admin("user-1", "user")
    assert exc_info.value.status_code == 403


# ── Protected routes ─────────────────────────────────────────────────────


def test_public_routes_need_no_identity():
    assert client.get("/health").status_code == 200
    assert client.get("/vehicles").status_code == 200


@pytest.mark.parametrize("method,path", [
    ("post", "/chat"),
    ("post", "/conversations"),
    ("get", "/conversations"),
    ("get", "/preferences"),
    ("post", "/recommendations"),
])
def test_user_routes_require_identity(method, path):
    resp = client.request(method.upper(), path, json={"message": "hi"})
    assert resp.status_code == 401


def test_analytics_requires_login():
    resp = client.get("/analytics")
    assert resp.status_code == 401


def test_analytics_forbidden_for_user():
    resp = client.get("/analytics", headers=USER)
    assert resp.status_code == 403


def test_analytics_allowed_for_admin():
    resp = client.get("/analytics", headers=ADMIN)
    assert resp.status_code == 200
