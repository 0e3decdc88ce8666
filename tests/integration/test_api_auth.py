from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from huntassist.api.app import create_app
from huntassist.db.models import AuthSession
from huntassist.db.repositories import hash_token
from huntassist.db.session import SessionLocal


def test_sign_up_sign_in_session_and_sign_out() -> None:
    client = TestClient(create_app())

    sign_up = client.post(
        "/api/auth/sign-up",
        json={"email": "Alice@Example.com", "password": "long-password", "name": "Alice"},
    )
    assert sign_up.status_code == 201
    assert sign_up.json()["email"] == "alice@example.com"
    assert "password_hash" not in sign_up.json()

    sign_in = client.post("/api/auth/sign-in", json={"email": "alice@example.com", "password": "long-password"})
    assert sign_in.status_code == 200
    token = sign_in.json()["token"]
    assert sign_in.json()["user"]["name"] == "Alice"
    assert sign_in.json()["expires_in_sec"] > 0
    assert client.cookies.get("huntassist_session") == token

    # Cookie-based session from the sign-in response.
    session = client.get("/api/auth/session")
    assert session.status_code == 200
    assert session.json()["email"] == "alice@example.com"

    bearer = TestClient(client.app).get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert bearer.status_code == 200

    sign_out = client.post("/api/auth/sign-out")
    assert sign_out.status_code == 204

    after = TestClient(client.app).get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert after.status_code == 401


def test_duplicate_sign_up_and_short_password_are_rejected() -> None:
    client = TestClient(create_app())
    payload = {"email": "bob@example.com", "password": "long-password"}

    assert client.post("/api/auth/sign-up", json=payload).status_code == 201

    duplicate = client.post("/api/auth/sign-up", json={**payload, "email": " BOB@example.com "})
    assert duplicate.status_code == 422
    assert duplicate.json()["field"] == "email"

    short = client.post("/api/auth/sign-up", json={"email": "carol@example.com", "password": "short"})
    assert short.status_code == 422
    assert short.json()["field"] == "password"


def test_wrong_password_is_401() -> None:
    client = TestClient(create_app())
    client.post("/api/auth/sign-up", json={"email": "dave@example.com", "password": "long-password"})

    resp = client.post("/api/auth/sign-in", json={"email": "dave@example.com", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}

    unknown = client.post("/api/auth/sign-in", json={"email": "nobody@example.com", "password": "long-password"})
    assert unknown.status_code == 401


def test_expired_session_is_rejected_and_removed() -> None:
    client = TestClient(create_app())
    client.post("/api/auth/sign-up", json={"email": "erin@example.com", "password": "long-password"})
    token = client.post(
        "/api/auth/sign-in", json={"email": "erin@example.com", "password": "long-password"}
    ).json()["token"]

    with SessionLocal() as db:
        row = db.query(AuthSession).filter_by(token_hash=hash_token(token)).one()
        row.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        db.commit()

    resp = TestClient(client.app).get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401

    with SessionLocal() as db:
        assert db.query(AuthSession).filter_by(token_hash=hash_token(token)).count() == 0
