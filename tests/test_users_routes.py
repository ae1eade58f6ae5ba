"""Tests for registration, login and identity lookup."""
from __future__ import annotations

from jose import jwt

from barberworld.config import ALGORITHM, SECRET_KEY


def test_register_login_and_me(client) -> None:
    created = client.post(
        "/users",
        json={"email": "fay@clients.test", "password": "long-enough-pw", "role": "client", "name": "Fay"},
    )
    assert created.status_code == 201
    user_id = created.json()["id"]

    login = client.post("/auth/login", data={"username": "fay@clients.test", "password": "long-enough-pw"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    assert claims["id"] == user_id
    assert claims["role"] == "client"

    me = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json() == {"id": user_id, "email": "fay@clients.test", "role": "client", "name": "Fay"}

    duplicate = client.post(
        "/users",
        json={"email": "fay@clients.test", "password": "long-enough-pw", "role": "client"},
    )
    assert duplicate.status_code == 409

    wrong = client.post("/auth/login", data={"username": "fay@clients.test", "password": "wrong-password"})
    assert wrong.status_code == 401


def test_get_user_profile(client, barber, carla, auth_headers) -> None:
    response = client.get(f"/users/{barber.id}", headers=auth_headers(carla))

    assert response.status_code == 200
    assert response.json()["name"] == "Bob"
    assert client.get("/users/999", headers=auth_headers(carla)).status_code == 404


def test_bad_token(client) -> None:
    response = client.get("/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_login_token_carries_identity(client) -> None:
    created = client.post(
        "/users",
        json={"email": "gus@clients.test", "password": "long-enough-pw", "role": "client", "name": "Gus"},
    )
    login = client.post("/auth/login", data={"username": " gus@clients.test ", "password": "long-enough-pw"})

    assert login.status_code == 200
    claims = jwt.get_unverified_claims(login.json()["access_token"])
    assert claims["id"] == created.json()["id"]
    assert claims["role"] == "client"


def test_unknown_login_asks_for_bearer(client) -> None:
    response = client.post("/auth/login", data={"username": "nobody@clients.test", "password": "whatever-pw"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
