import pytest

import crud
from models import User


@pytest.mark.asyncio
async def test_register_login_check_logout(client, db):
    response = await client.post("/auth/register", json={
        "username": "carol", "password": "pw-1234", "name": "Carol Park",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["username"] == "carol"
    assert body["user"]["is_admin"] is False
    assert "password" not in body["user"]

    stored = db.query(User).filter(User.username == "carol").one()
    assert stored.password != "pw-1234"

    response = await client.get("/auth/check")
    assert response.json() == {"isLoggedIn": False, "user": None}

    response = await client.post("/auth/login", json={"username": "carol", "password": "pw-1234"})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["name"] == "Carol Park"

    # The login response sets a session cookie the client sends back
    response = await client.get("/auth/check")
    assert response.json()["isLoggedIn"] is True
    assert response.json()["user"]["username"] == "carol"

    response = await client.post("/auth/logout")
    assert response.json() == {"success": True}
    client.cookies.clear()
    response = await client.get("/auth/check")
    assert response.json()["isLoggedIn"] is False

    # The token also works as a bearer header
    response = await client.get(
        "/auth/check",
        headers={"Authorization": f"Bearer {body['access_token']}"},
    )
    assert response.json()["isLoggedIn"] is True


@pytest.mark.asyncio
async def test_register_duplicate_username(client, alice):
    response = await client.post("/auth/register", json={
        "username": "alice", "password": "whatever", "name": "Other Alice",
    })
    assert response.status_code == 409
    assert response.json() == {"error": "Username already registered"}


@pytest.mark.asyncio
async def test_register_race_on_username_is_conflict(client, alice, monkeypatch):
    # Simulate a concurrent registration landing between the lookup and the insert
    monkeypatch.setattr(crud, "get_user_by_username", lambda db, username: None)
    response = await client.post("/auth/register", json={
        "username": "alice", "password": "whatever", "name": "Other Alice",
    })
    assert response.status_code == 409
    assert response.json() == {"error": "Username already registered"}


@pytest.mark.asyncio
async def test_register_requires_fields(client):
    response = await client.post("/auth/register", json={"username": "dave", "password": ""})
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_login_with_wrong_password(client, alice):
    response = await client.post("/auth/login", json={"username": "alice", "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect username or password"}

    response = await client.post("/auth/login", json={"username": "nobody", "password": "nope"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_check_ignores_invalid_token(client):
    response = await client.get("/auth/check", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 200
    assert response.json() == {"isLoggedIn": False, "user": None}


@pytest.mark.asyncio
async def test_update_profile(client, alice, headers_for):
    response = await client.put("/auth/profile", json={"name": "Alice Park"}, headers=headers_for(alice))
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Alice Park"

    response = await client.get("/auth/check", headers=headers_for(alice))
    assert response.json()["user"]["name"] == "Alice Park"


@pytest.mark.asyncio
async def test_update_profile_requires_login(client):
    response = await client.put("/auth/profile", json={"name": "Ghost"})
    assert response.status_code == 401
    assert response.json() == {"error": "Login required"}
