import pytest

pytestmark = pytest.mark.api


async def test_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_login(client, users):
    response = await client.post("/auth/login", json={"username": "sales_1", "password": "sales123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get("/quotations", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


async def test_login_wrong_password(client, users):
    response = await client.post("/auth/login", json={"username": "sales_1", "password": "nope"})
    assert response.status_code == 401


async def test_missing_token(client, users):
    response = await client.get("/quotations")
    assert response.status_code == 401


async def test_garbage_token(client, users):
    response = await client.get("/quotations", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_delete_requires_admin(client, sales_headers):
    response = await client.delete("/quotations/1", headers=sales_headers)
    assert response.status_code == 403


async def test_login_returns_only_an_access_token(client, users):
    response = await client.post("/auth/login", json={"username": "admin_1", "password": "admin123"})
    assert set(response.json()) == {"access_token", "token_type"}


async def test_logout_invalidates_issued_tokens(client, users):
    response = await client.post("/auth/login", json={"username": "sales_1", "password": "sales123"})
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = await client.post("/auth/logout", headers=headers)
    assert response.status_code == 200

    response = await client.get("/quotations", headers=headers)
    assert response.status_code == 401

    response = await client.post("/auth/login", json={"username": "sales_1", "password": "sales123"})
    response = await client.get(
        "/quotations", headers={"Authorization": f"Bearer {response.json()['access_token']}"}
    )
    assert response.status_code == 200
