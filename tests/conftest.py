# tests/conftest.py
from __future__ import annotations

import os
import tempfile
import time
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="pairdrop-tests-"))

from pairdrop.api.v1.dependencies import get_session_service_dep
from pairdrop.main import app as fastapi_app
from pairdrop.services import ConnectionStore, MessageChannel, SessionService

INACTIVITY_TIMEOUT = 30.0
STALE_AFTER = 300.0


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float | None = None) -> None:
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture()
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def store(storage_root: Path, clock: FakeClock) -> ConnectionStore:
    return ConnectionStore(
        storage_root / "connections",
        inactivity_timeout=INACTIVITY_TIMEOUT,
        lock_timeout=1.0,
        clock=clock,
    )


@pytest.fixture()
def channel(storage_root: Path, clock: FakeClock) -> MessageChannel:
    return MessageChannel(
        storage_root / "audio",
        reference_base=storage_root,
        stale_after=STALE_AFTER,
        clock=clock,
    )


@pytest.fixture()
def session_service(store: ConnectionStore, channel: MessageChannel) -> SessionService:
    return SessionService(store, channel)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_service(app: FastAPI, session_service: SessionService) -> Iterator[None]:
    app.dependency_overrides[get_session_service_dep] = lambda: session_service
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_session_service_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def connected_pair(session_service: SessionService) -> tuple[str, str]:
    """Pair alice and bob in both directions."""
    session_service.connect("alice", "bob")
    session_service.connect("bob", "alice")
    return "alice", "bob"
