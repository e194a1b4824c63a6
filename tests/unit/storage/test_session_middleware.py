import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from middleware.session import ServerSessionMiddleware, regenerate_session
from storage import MemorySessionStore

COOKIE = "gymsync.sid"


@pytest.fixture
def sessions():
    return MemorySessionStore()


@pytest.fixture
def session_client(sessions):
    app = FastAPI()
    app.add_middleware(
        ServerSessionMiddleware,
        store=sessions,
        secret_key="segredo",
        session_cookie=COOKIE,
        max_age=3600,
    )

    @app.get("/set")
    def set_value(request: Request, value: str):
        request.session["value"] = value
        return {"ok": True}

    @app.get("/get")
    def get_value(request: Request):
        return {"value": request.session.get("value")}

    @app.get("/clear")
    def clear(request: Request):
        request.session.clear()
        return {"ok": True}

    @app.get("/rotate")
    def rotate(request: Request):
        regenerate_session(request)
        return {"ok": True}

    return TestClient(app)


def test_no_cookie_for_empty_session(session_client, sessions):
    response = session_client.get("/get")
    assert response.json() == {"value": None}
    assert "set-cookie" not in response.headers
    assert len(sessions) == 0


def test_cookie_only_carries_signed_sid(session_client, sessions):
    response = session_client.get("/set", params={"value": "abc"})
    header = response.headers["set-cookie"]
    assert header.startswith(f"{COOKIE}=")
    assert "abc" not in header
    assert "httponly" in header
    assert "samesite=lax" in header
    assert "Max-Age=3600" in header
    assert "secure" not in header
    assert len(sessions) == 1

    assert session_client.get("/get").json() == {"value": "abc"}


def test_unchanged_session_is_not_rewritten(session_client):
    session_client.get("/set", params={"value": "abc"})
    response = session_client.get("/get")
    assert "set-cookie" not in response.headers


def test_tampered_cookie_is_ignored(session_client):
    session_client.get("/set", params={"value": "abc"})
    session_client.cookies.clear()
    response = session_client.get("/get", headers={"Cookie": f"{COOKIE}=forjado.abc.def"})
    assert response.json() == {"value": None}


def test_clear_destroys_session(session_client, sessions):
    session_client.get("/set", params={"value": "abc"})
    response = session_client.get("/clear")
    assert "expires=Thu, 01 Jan 1970" in response.headers["set-cookie"]
    assert len(sessions) == 0


def test_rotate_issues_new_sid_and_keeps_data(session_client, sessions):
    session_client.get("/set", params={"value": "abc"})
    before = session_client.cookies.get(COOKIE)

    session_client.get("/rotate")
    after = session_client.cookies.get(COOKIE)

    assert before != after
    assert len(sessions) == 1
    assert session_client.get("/get").json() == {"value": "abc"}


def test_https_only_sets_secure():
    app = FastAPI()
    app.add_middleware(
        ServerSessionMiddleware,
        store=MemorySessionStore(),
        secret_key="segredo",
        https_only=True,
    )

    @app.get("/set")
    def set_value(request: Request):
        request.session["x"] = 1
        return {}

    response = TestClient(app, base_url="https://testserver").get("/set")
    assert "secure" in response.headers["set-cookie"]
