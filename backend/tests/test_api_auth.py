"""API tests for login and health endpoints."""

from lms.api.dependencies import token_service

from conftest import ADMIN_PASSWORD


async def test_login_returns_token(client, admin_user):
    response = await client.post("/api/auth/login", json={"email": "admin@example.com", "password": ADMIN_PASSWORD})
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["expiresAt"]
    claims = token_service.decode(body["data"]["token"])
    assert claims["sub"] == str(admin_user.id)
    assert claims["role"] == "Admin"


async def test_login_token_grants_access(client, admin_user):
    login = await client.post("/api/auth/login", json={"email": "admin@example.com", "password": ADMIN_PASSWORD})
    token = login.json()["data"]["token"]

    response = await client.get("/api/users", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


async def test_login_wrong_password(client, admin_user):
    response = await client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong"})
    body = response.json()

    assert response.status_code == 401
    assert body["errorCode"] == 3002
    assert "data" not in body


async def test_login_unknown_email(client, db):
    response = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

    assert response.status_code == 401
    assert response.json()["errorCode"] == 3002


async def test_login_validation(client, db):
    response = await client.post("/api/auth/login", json={"email": "nope"})

    assert response.status_code == 400
    assert response.json()["errorCode"] == 1001


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["x-content-type-options"] == "nosniff"


async def test_readiness(client, fake_redis):
    response = await client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["services"] == {"database": "ok", "cache": "ok"}

    fake_redis.fail = True
    response = await client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["services"]["cache"] == "unavailable"
