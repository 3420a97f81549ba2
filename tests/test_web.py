import urllib.parse

import pytest

from terminus_activities import web
from terminus_activities.auth import TokenError, TokenGrant, TokenResponseError
from terminus_activities.service import ActivitiesService


@pytest.fixture
def app(service, tmp_path):
    (tmp_path / "index.html").write_text("<h1>Terminus</h1>", encoding="utf-8")
    (tmp_path / "script.js").write_text("console.log('hi');", encoding="utf-8")
    return web.create_app(service, static_dir=str(tmp_path))


@pytest.fixture
def client(app):
    return app.test_client()


def test_activities_unauthenticated(client, aggregator):
    resp = client.get("/activities")
    assert resp.status_code == 401
    assert aggregator.calls == []


def test_activities_unknown_token(client):
    client.set_cookie("user_id", "nobody")
    resp = client.get("/activities")
    assert resp.status_code == 401
    assert b"Token not found" in resp.data


def test_activities_cached(client, cache):
    cache.write("123", [{"name": "Cached Ride"}])
    client.set_cookie("user_id", "123")
    resp = client.get("/activities")
    assert resp.status_code == 200
    assert resp.mimetype == "application/json"
    assert resp.get_json() == [{"name": "Cached Ride"}]


def test_activities_fetch_success(client):
    client.set_cookie("user_id", "456")
    resp = client.get("/activities")
    assert resp.status_code == 200
    assert b"API Ride to Terminus" in resp.data


def test_activities_fetch_error(tokens, cache, failing_aggregator, tmp_path):
    service = ActivitiesService(tokens=tokens, cache=cache, aggregator=failing_aggregator)
    client = web.create_app(service, static_dir=str(tmp_path)).test_client()
    client.set_cookie("user_id", "789")
    resp = client.get("/activities")
    assert resp.status_code == 500
    assert b"Failed to fetch activities" in resp.data
    assert cache.peek("789") is None


def test_activities_preserve_key_order(client, cache):
    cache.write("123", [{"start_date": "2025-06-15", "name": "terminus", "distance": 1.0}])
    client.set_cookie("user_id", "123")
    resp = client.get("/activities")
    assert resp.data.decode().index("start_date") < resp.data.decode().index("name")


def test_index_and_static_files(client):
    assert b"Terminus" in client.get("/").data
    assert client.get("/static/script.js").status_code == 200


def test_login_redirects_to_strava(client, monkeypatch):
    monkeypatch.setattr(web, "CLIENT_ID", "cid")
    monkeypatch.setattr(web, "REDIRECT_URI", "http://localhost:8080/oauth/callback")
    resp = client.get("/login")
    assert resp.status_code == 302
    location = urllib.parse.urlparse(resp.headers["Location"])
    query = urllib.parse.parse_qs(location.query)
    assert location.netloc == "www.strava.com"
    assert query == {
        "client_id": ["cid"],
        "redirect_uri": ["http://localhost:8080/oauth/callback"],
        "response_type": ["code"],
        "scope": ["activity:read"],
    }


def test_callback_missing_code(client):
    resp = client.get("/oauth/callback")
    assert resp.status_code == 400
    assert resp.mimetype == "text/plain"
    assert resp.data == b"Missing code"


def test_callback_stores_token_and_sets_cookie(client, service, monkeypatch):
    seen = []

    def fake_exchange(code):
        seen.append(code)
        return TokenGrant(athlete_id="42", access_token="AAA", refresh_token="BBB")

    monkeypatch.setattr(web, "exchange_authorization_code", fake_exchange)
    resp = client.get("/oauth/callback?code=abc")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")
    cookie = resp.headers["Set-Cookie"]
    assert "user_id=42" in cookie
    assert "Path=/" in cookie
    assert "SameSite=Lax" in cookie
    assert seen == ["abc"]
    assert service.tokens.get("42") == "AAA"


@pytest.mark.parametrize(
    "error, message",
    [
        (TokenError("down"), b"Token exchange failed"),
        (TokenResponseError("junk"), b"Invalid token response"),
    ],
)
def test_callback_exchange_failures(client, service, monkeypatch, error, message):
    def fake_exchange(code):
        raise error

    monkeypatch.setattr(web, "exchange_authorization_code", fake_exchange)
    resp = client.get("/oauth/callback?code=abc")
    assert resp.status_code == 500
    assert message in resp.data
    assert "Set-Cookie" not in resp.headers
