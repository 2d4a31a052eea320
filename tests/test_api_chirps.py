"""
tests/test_api_chirps.py -- Integration tests for the /api/chirps endpoints.

Chirp timestamps come from api_clock, so each helper post advances it by a
second to keep ordering deterministic.
"""

from __future__ import annotations

import uuid

import pytest

from conftest import auth_header


@pytest.fixture(scope="module")
def other_token(api_client):
    """Access token for a second registered user."""
    client, _, _ = api_client
    client.post("/api/users", json={"email": "skyler@breakingbad.com", "password": "car-wash"})
    resp = client.post("/api/login", json={"email": "skyler@breakingbad.com", "password": "car-wash"})
    return resp.json()["token"]


def _post(client, api_clock, token, body):
    resp = client.post("/api/chirps", json={"body": body}, headers=auth_header(token))
    api_clock.advance(seconds=1)
    return resp


def test_create_chirp(api_client, api_clock):
    client, token, uid = api_client
    resp = _post(client, api_clock, token, "I'm the one who knocks!")
    assert resp.status_code == 201
    data = resp.json()
    assert data["body"] == "I'm the one who knocks!"
    assert data["user_id"] == str(uid)
    assert uuid.UUID(data["id"])


def test_create_chirp_masks_banned_words(api_client, api_clock):
    client, token, _ = api_client
    resp = _post(client, api_clock, token, "What a Kerfuffle, sharbert")
    assert resp.json()["body"] == "What a ****, ****"


def test_create_chirp_too_long(api_client, api_clock):
    client, token, _ = api_client
    resp = _post(client, api_clock, token, "x" * 141)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "chirp_too_long"


def test_create_chirp_at_limit(api_client, api_clock):
    client, token, _ = api_client
    assert _post(client, api_clock, token, "x" * 140).status_code == 201


def test_create_chirp_requires_auth(api_client):
    client, _, _ = api_client
    assert client.post("/api/chirps", json={"body": "anon"}).status_code == 401


def test_get_chirp(api_client, api_clock):
    client, token, _ = api_client
    created = _post(client, api_clock, token, "fetch me").json()
    resp = client.get(f"/api/chirps/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


def test_get_missing_chirp(api_client):
    client, _, _ = api_client
    resp = client.get(f"/api/chirps/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_get_chirp_bad_id(api_client):
    client, _, _ = api_client
    assert client.get("/api/chirps/not-a-uuid").status_code == 400


def test_list_chirps_sorted(api_client, api_clock):
    client, token, _ = api_client
    _post(client, api_clock, token, "older")
    _post(client, api_clock, token, "newer")

    ascending = [c["created_at"] for c in client.get("/api/chirps").json()]
    assert ascending == sorted(ascending)

    descending = client.get("/api/chirps", params={"sort": "desc"}).json()
    assert [c["created_at"] for c in descending] == sorted(ascending, reverse=True)
    assert descending[0]["body"] == "newer"


def test_list_chirps_by_author(api_client, api_clock, other_token):
    client, token, uid = api_client
    _post(client, api_clock, other_token, "not mine")
    mine = client.get("/api/chirps", params={"author_id": str(uid)}).json()
    assert mine
    assert all(c["user_id"] == str(uid) for c in mine)
    assert "not mine" not in [c["body"] for c in mine]


def test_delete_own_chirp(api_client, api_clock):
    client, token, _ = api_client
    chirp_id = _post(client, api_clock, token, "delete me").json()["id"]
    resp = client.delete(f"/api/chirps/{chirp_id}", headers=auth_header(token))
    assert resp.status_code == 204
    assert client.get(f"/api/chirps/{chirp_id}").status_code == 404


def test_delete_other_users_chirp_forbidden(api_client, api_clock, other_token):
    client, token, _ = api_client
    chirp_id = _post(client, api_clock, token, "hands off").json()["id"]
    resp = client.delete(f"/api/chirps/{chirp_id}", headers=auth_header(other_token))
    assert resp.status_code == 403
    assert client.get(f"/api/chirps/{chirp_id}").status_code == 200


def test_delete_missing_chirp(api_client):
    client, token, _ = api_client
    resp = client.delete(f"/api/chirps/{uuid.uuid4()}", headers=auth_header(token))
    assert resp.status_code == 404


def test_delete_requires_auth(api_client, api_clock):
    client, token, _ = api_client
    chirp_id = _post(client, api_clock, token, "keep me").json()["id"]
    assert client.delete(f"/api/chirps/{chirp_id}").status_code == 401
