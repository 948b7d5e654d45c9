from __future__ import annotations

import stat
from pathlib import Path

from conftest import mint_token
from noma_client_sdk.auth_store import AuthStore
from noma_client_sdk.credentials import CredentialVerifier
from noma_client_sdk.storage import (
    SESSION_KEY,
    DeviceStorage,
    install_prompt_shown,
    mark_install_prompt_shown,
)


def test_session_round_trips_through_device_storage(tmp_path: Path, verifier: CredentialVerifier) -> None:
    store = AuthStore(storage=DeviceStorage(base_dir=tmp_path))
    store.save(verifier.session_from_token(mint_token(session_id="sess-9"), env_name="test"))

    restored = AuthStore(storage=DeviceStorage(base_dir=tmp_path))
    session = restored.load()

    assert session is not None
    assert session.id == "sess-9"
    assert session.user.email == "ana@example.com"
    assert session.env_name == "test"
    assert restored.is_authenticated()


def test_clear_removes_persisted_session(auth_store: AuthStore, verifier: CredentialVerifier) -> None:
    auth_store.save(verifier.session_from_token(mint_token()))

    auth_store.clear()

    assert auth_store.token is None
    assert auth_store.storage.get(SESSION_KEY) is None


def test_invalid_persisted_session_is_discarded(auth_store: AuthStore) -> None:
    auth_store.storage.set(SESSION_KEY, {"id": "sess-1"})

    assert auth_store.load() is None
    assert auth_store.storage.get(SESSION_KEY) is None


def test_corrupt_storage_file_is_treated_as_empty(tmp_path: Path) -> None:
    storage = DeviceStorage(base_dir=tmp_path)
    (tmp_path / storage.filename).write_text("{not json", encoding="utf-8")

    assert storage.get(SESSION_KEY) is None
    assert not (tmp_path / storage.filename).exists()


def test_storage_file_is_private(storage: DeviceStorage, tmp_path: Path) -> None:
    storage.set("k", "v")

    mode = stat.S_IMODE((tmp_path / storage.filename).stat().st_mode)
    assert mode == 0o600


def test_install_prompt_flag(storage: DeviceStorage) -> None:
    assert not install_prompt_shown(storage)

    mark_install_prompt_shown(storage)

    assert install_prompt_shown(storage)
