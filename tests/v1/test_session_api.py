# tests/v1/test_session_api.py
"""Tests for pairing lifecycle endpoints."""

from fastapi import status
from fastapi.testclient import TestClient


def _connect(client: TestClient, my_id: str, partner_id: str):
    return client.post(
        "/api/v1/session/connect",
        json={"my_id": my_id, "partner_id": partner_id},
    )


def _check(client: TestClient, my_id: str, partner_id: str):
    return client.get(
        "/api/v1/session/check",
        params={"my_id": my_id, "partner_id": partner_id},
    )


def test_connect_both_directions(client: TestClient) -> None:
    """Both members of a pair get the same pairing key."""
    first = _connect(client, "alice", "bob")
    second = _connect(client, "bob", "alice")

    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_200_OK
    assert first.json() == {"message": "Connection established", "pair_key": "pair_alice_bob"}
    assert second.json()["pair_key"] == "pair_alice_bob"


def test_connect_busy_partner(client: TestClient) -> None:
    """A partner paired with someone else cannot be claimed."""
    _connect(client, "alice", "bob")
    _connect(client, "bob", "alice")

    response = _connect(client, "carol", "bob")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "Partner is already connected to someone else"


def test_connect_invalid_identifier(client: TestClient) -> None:
    """Identifiers with nothing usable are rejected."""
    response = _connect(client, "!!!", "bob")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Invalid user ID format"


def test_connect_overlong_identifier(client: TestClient) -> None:
    """Identifiers too long to store are rejected as invalid."""
    response = _connect(client, "a" * 300, "bob")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "at most" in response.json()["detail"]


def test_connect_missing_field(client: TestClient) -> None:
    """Request validation still applies before the protocol runs."""
    response = client.post("/api/v1/session/connect", json={"my_id": "alice"})

    assert response.status_code == 422


def test_check_lifecycle(client: TestClient, clock) -> None:
    """Checks keep a pairing alive until the caller goes quiet."""
    assert _check(client, "alice", "bob").json() == {"connection_active": False, "audio": None}

    _connect(client, "alice", "bob")
    clock.advance(20)
    assert _check(client, "alice", "bob").json()["connection_active"] is True
    clock.advance(20)
    assert _check(client, "alice", "bob").json()["connection_active"] is True

    clock.advance(31)
    assert _check(client, "alice", "bob").json()["connection_active"] is False
    clock.advance(1)
    assert _check(client, "alice", "bob").json()["connection_active"] is False


def test_disconnect(client: TestClient, store) -> None:
    """Disconnect removes the record and is safe to repeat."""
    _connect(client, "alice", "bob")

    response = client.post("/api/v1/session/disconnect", json={"my_id": "alice"})
    again = client.post("/api/v1/session/disconnect", json={"my_id": "alice"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Disconnected successfully"}
    assert again.status_code == status.HTTP_200_OK
    assert store.get("alice") is None
    assert _check(client, "alice", "bob").json()["connection_active"] is False


def test_unexpected_error_is_hidden(app, session_service, mocker) -> None:
    """Internal failures are logged but not leaked to the client."""
    mocker.patch.object(session_service, "check", side_effect=ValueError("secret detail"))

    with TestClient(app, raise_server_exceptions=False) as client:
        response = _check(client, "alice", "bob")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Internal server error"}
