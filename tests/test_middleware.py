"""
Tests for the FastAPI session dependencies and the Starlette carrier.

A small app is built per test so the dependencies are exercised the way a
host application would use them.
"""

import pytest
from fastapi import Depends, FastAPI, Request, Response
from fastapi.testclient import TestClient

from sessionstash.modules.middleware import (
    StarletteCarrier,
    current_session,
    existing_session,
    get_session_manager,
)
from sessionstash.modules.session import SessionLike, SessionManager

COOKIE = "_SESSION_ID"


def build_app(manager) -> FastAPI:
    app = FastAPI()
    app.state.session_manager = manager

    @app.get("/visits")
    async def visits(
        session: SessionLike = Depends(current_session),
        manager: SessionManager = Depends(get_session_manager),
    ):
        count, _ = session.get_int("visits")
        session.set("visits", count + 1)
        await manager.save(session)
        return {"session_id": session.session_id, "visits": count + 1}

    @app.post("/whoami")
    async def whoami(session: SessionLike = Depends(existing_session)):
        return {"session_id": session.session_id}

    @app.get("/cookie")
    async def cookie(request: Request):
        carrier = StarletteCarrier(request)
        try:
            carrier.set_cookie(COOKIE, "value", None, False)
        except RuntimeError as e:
            return {"error": str(e)}
        return {"error": None}

    return app


@pytest.fixture
def client(session_manager):
    return TestClient(build_app(session_manager))


class TestCurrentSession:
    def test_creates_then_reuses_session(self, client):
        first = client.get("/visits").json()
        assert first["visits"] == 1
        assert client.cookies.get(COOKIE) == first["session_id"]

        second = client.get("/visits").json()
        assert second == {"session_id": first["session_id"], "visits": 2}

    def test_stale_cookie_gets_new_session(self, client):
        client.cookies.set(COOKIE, "SESSID_0_stale000")

        response = client.get("/visits")

        assert response.json()["visits"] == 1
        assert response.json()["session_id"] != "SESSID_0_stale000"
        assert f"{COOKIE}={response.json()['session_id']}" in response.headers["set-cookie"]

    def test_manager_missing(self):
        client = TestClient(build_app(None))

        response = client.get("/visits")

        assert response.status_code == 503
        assert response.json()["detail"] == "Service not initialized"


class TestExistingSession:
    def test_urlencoded_form_field(self, client):
        session_id = client.get("/visits").json()["session_id"]
        client.cookies.clear()

        response = client.post("/whoami", data={COOKIE: session_id})

        assert response.status_code == 200
        assert response.json() == {"session_id": session_id}

    def test_multipart_form_field(self, client):
        session_id = client.get("/visits").json()["session_id"]
        client.cookies.clear()

        response = client.post(
            "/whoami",
            data={COOKIE: session_id},
            files={"attachment": ("note.txt", b"hello", "text/plain")},
        )

        assert response.json() == {"session_id": session_id}

    def test_uploaded_file_is_not_an_identifier(self, client):
        """A file part under the field name falls through to the query string."""
        session_id = client.get("/visits").json()["session_id"]
        client.cookies.clear()

        response = client.post(
            "/whoami",
            params={COOKIE: session_id},
            files={COOKIE: ("id.txt", b"not-an-id", "text/plain")},
        )

        assert response.json() == {"session_id": session_id}

    def test_no_identifier(self, client):
        response = client.post("/whoami")

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found"


def test_carrier_without_response_cannot_set_cookie(client):
    response = client.get("/cookie")

    assert "no response" in response.json()["error"]
