from fastapi import FastAPI
from fastapi.testclient import TestClient

from studiobook.main import app
from studiobook.middleware.security_headers import SecurityHeadersMiddleware


def test_security_headers_on_every_response():
    client = TestClient(app)
    res = client.get("/healthz/live")
    assert res.status_code == 200
    assert res.headers["Content-Security-Policy"].startswith("default-src 'self'")
    assert res.headers["Strict-Transport-Security"] == "max-age=63072000; includeSubDomains"
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["Referrer-Policy"] == "no-referrer"
    assert res.headers["Cross-Origin-Resource-Policy"] == "same-origin"


def test_security_headers_do_not_override_route_values():
    mini = FastAPI()
    mini.add_middleware(SecurityHeadersMiddleware, headers={"Referrer-Policy": "same-origin"})

    @mini.get("/framed")
    def framed():
        from fastapi.responses import PlainTextResponse

        return PlainTextResponse("ok", headers={"X-Frame-Options": "SAMEORIGIN"})

    res = TestClient(mini).get("/framed")
    assert res.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert res.headers["Referrer-Policy"] == "same-origin"


def test_cors_allows_configured_origin():
    client = TestClient(app)
    res = client.get("/", headers={"Origin": "http://localhost:3000"})
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_root_and_readiness():
    client = TestClient(app)
    assert client.get("/").json() == {"message": "Welcome to the Studio Booking API"}
    ready = client.get("/healthz/ready")
    assert ready.status_code == 200
    assert ready.json()["ready"] is True
    assert ready.headers["cache-control"] == "no-store"
