import json
from unittest.mock import patch

import pytest
from itsdangerous import URLSafeTimedSerializer

from dealership import auth
from dealership.app import app
from dealership.auth import InMemoryUserStore
from dealership.dashboard import METRICS, dashboard_data

COOKIE = "auth-session"


def test_login_sets_signed_cookie(client):
    r = client.post("/api/auth/login", json={"username": "bdavis", "password": "Ben$2025"})

    assert r.status_code == 200
    assert r.get_json() == {"success": True, "user": {"username": "bdavis", "name": "Brent Davis"}}

    set_cookie = r.headers["Set-Cookie"]
    assert set_cookie.startswith(f"{COOKIE}=")
    assert "HttpOnly" in set_cookie
    assert "SameSite=Lax" in set_cookie
    assert "Max-Age=604800" in set_cookie

    # not plaintext JSON any more
    value = client.get_cookie(COOKIE).value
    assert not value.startswith("{")
    signer = URLSafeTimedSerializer(app.config["SECRET_KEY"], salt="auth-session")
    assert signer.loads(value) == {"username": "bdavis", "name": "Brent Davis", "loggedIn": True}


def test_login_second_user(client):
    r = client.post("/api/auth/login", json={"username": "aoberlin", "password": "Ben$2025"})
    assert r.get_json()["user"]["name"] == "Andy Oberlin"


def test_bad_password(client):
    r = client.post("/api/auth/login", json={"username": "bdavis", "password": "nope"})
    assert r.status_code == 401
    assert r.get_json() == {"error": "Invalid username or password"}
    assert client.get_cookie(COOKIE) is None


def test_unknown_user(client):
    r = client.post("/api/auth/login", json={"username": "ghost", "password": "Ben$2025"})
    assert r.status_code == 401
    assert r.get_json() == {"error": "Invalid username or password"}


def test_missing_fields(client):
    assert client.post("/api/auth/login", json={"username": "bdavis"}).status_code == 400
    assert client.post("/api/auth/login", json={"username": 7, "password": "x"}).status_code == 400


def test_dashboard_redirects_without_session(client):
    r = client.get("/dashboard")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


def test_dashboard_api_needs_session(client):
    r = client.get("/api/dashboard/metrics")
    assert r.status_code == 401


def test_dashboard_with_session(logged_in):
    r = logged_in.get("/dashboard")
    assert r.status_code == 200
    data = r.get_json()
    assert data["user"] == {"username": "bdavis", "name": "Brent Davis"}
    assert data["metrics"]["totalSales"] == 179
    assert data["metrics"]["monthlyRevenue"] == 2400000
    assert len(data["cards"]) == 6
    assert data["salesPerformance"]["soldToday"]["count"] == 12

    assert logged_in.get("/api/dashboard/metrics").status_code == 200


def test_session_endpoint(logged_in):
    r = logged_in.get("/api/auth/session")
    assert r.get_json() == {"loggedIn": True, "user": {"username": "bdavis", "name": "Brent Davis"}}


def test_logout_clears_cookie(logged_in):
    r = logged_in.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.get_json() == {"success": True}
    assert logged_in.get_cookie(COOKIE) is None
    assert logged_in.get("/dashboard").status_code == 302


def test_plaintext_cookie_is_rejected(client):
    client.set_cookie(COOKIE, json.dumps({"username": "bdavis", "name": "Brent Davis", "loggedIn": True}))
    assert client.get("/dashboard").status_code == 302


def test_cookie_signed_with_other_key_is_rejected(client):
    forged = URLSafeTimedSerializer("not-the-key", salt="auth-session").dumps(
        {"username": "bdavis", "name": "Brent Davis", "loggedIn": True}
    )
    client.set_cookie(COOKIE, forged)
    assert client.get("/api/dashboard/metrics").status_code == 401


def test_logged_in_false_is_rejected(client):
    token = URLSafeTimedSerializer(app.config["SECRET_KEY"], salt="auth-session").dumps(
        {"username": "bdavis", "name": "Brent Davis", "loggedIn": False}
    )
    client.set_cookie(COOKIE, token)
    assert client.get("/api/dashboard/metrics").status_code == 401


def test_expired_session(logged_in):
    with patch.object(auth.Config, "AUTH_SESSION_MAX_AGE", -1):
        assert logged_in.get("/api/dashboard/metrics").status_code == 401


def test_user_store_hashes_are_salted():
    store = InMemoryUserStore()
    a = store.add("a", "A", "secret")
    b = store.add("b", "B", "secret")
    assert a.password_hash != b.password_hash
    assert "secret" not in a.password_hash
    assert store.verify("a", "secret") == a
    assert store.verify("a", "wrong") is None
    assert store.verify("missing", "secret") is None


def test_custom_store_can_be_swapped(client):
    store = InMemoryUserStore()
    store.add("sales", "Sales Desk", "pw")
    with patch.object(auth, "user_store", store):
        assert client.post("/api/auth/login", json={"username": "sales", "password": "pw"}).status_code == 200
        assert client.post("/api/auth/login", json={"username": "bdavis", "password": "Ben$2025"}).status_code == 401


def test_production_requires_password_hash():
    with patch.object(auth.Config, "DASHBOARD_PASSWORD_HASH", ""), \
            patch.object(auth.Config, "IS_PRODUCTION", True):
        with pytest.raises(ValueError, match="DASHBOARD_PASSWORD_HASH"):
            auth.build_default_store()


def test_configured_hash_is_used():
    h = "pbkdf2:sha256:1$salt$deadbeef"
    with patch.object(auth.Config, "DASHBOARD_PASSWORD_HASH", h):
        store = auth.build_default_store()
    assert store.get("bdavis").password_hash == h
    assert len(store) == 2


def test_dashboard_data_is_a_copy():
    data = dashboard_data()
    data["metrics"]["totalSales"] = 0
    data["salesPerformance"]["team"].clear()
    assert METRICS["totalSales"] == 179
    assert dashboard_data()["salesPerformance"]["team"]


@pytest.mark.parametrize("body", [["bdavis", "Ben$2025"], "bdavis", 42])
def test_login_rejects_non_object_body(client, body):
    r = client.post("/api/auth/login", json=body)
    assert r.status_code == 400
    assert r.get_json() == {"error": "Invalid request body"}
    assert client.get_cookie(COOKIE) is None
