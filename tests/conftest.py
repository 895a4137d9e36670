# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from workdesk.cli.bootstrap import create_initial_state
from workdesk.core.session import SessionGate
from workdesk.core.state import AppState
from workdesk.remote.client import WorkdeskApiClient
from workdesk.sync.entity_store import NoteStore, TaskStore

from .fakes import BASE_URL, FakeBackend, RecordingPresenter


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="workdesk-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_base_url=BASE_URL,
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
        delete_confirm_seconds=5.0,
        notes_refresh_seconds=5.0,
        console_enabled=False,
    )


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def alice(backend: FakeBackend) -> dict:
    return backend.add_user("alice", "wonderland", "Alice")


@pytest.fixture()
def api(backend: FakeBackend) -> WorkdeskApiClient:
    """
    Real HTTP client routed into the in-memory backend.

    NOTE: no network; httpx.MockTransport calls FakeBackend directly.
    """
    return WorkdeskApiClient(BASE_URL, transport=httpx.MockTransport(backend))


@pytest.fixture()
def session(api: WorkdeskApiClient) -> SessionGate:
    return SessionGate(api)


@pytest.fixture()
def tasks(api: WorkdeskApiClient, session: SessionGate) -> TaskStore:
    return TaskStore(api, session)


@pytest.fixture()
def notes(api: WorkdeskApiClient, session: SessionGate) -> NoteStore:
    return NoteStore(api, session)


@pytest.fixture()
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture()
def state(settings: SimpleNamespace, api: WorkdeskApiClient, presenter: RecordingPresenter) -> AppState:
    """AppState wired exactly like the CLI, but with the fake backend and a recording presenter."""
    return create_initial_state(settings=settings, api=api, presenter=presenter)
