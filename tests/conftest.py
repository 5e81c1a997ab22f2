"""Shared fixtures for settings-sync tests."""

import itertools
from pathlib import Path
from typing import Optional

import pytest

from settings_sync.sync.exceptions import GistNotFoundError, SyncError
from settings_sync.sync.models import FileEntry, FileSet, RemoteDocument, Visibility
from settings_sync.sync.store import RemoteStore


class FakeGistStore(RemoteStore):
    """In-memory remote store recording every call."""

    def __init__(self) -> None:
        self.gists: dict[str, RemoteDocument] = {}
        self.calls: list[tuple] = []
        self.fetch_error: Optional[SyncError] = None
        self.write_error: Optional[SyncError] = None
        self._ids = (f"gist{n}" for n in itertools.count(1))

    def add(self, gist_id: str, files: dict[str, str]) -> RemoteDocument:
        gist = RemoteDocument(
            id=gist_id,
            files={name: FileEntry(content=content) for name, content in files.items()},
        )
        self.gists[gist_id] = gist
        return gist

    @property
    def writes(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in ("create", "update", "delete")]

    def fetch(self, gist_id: str) -> RemoteDocument:
        self.calls.append(("fetch", gist_id))
        if self.fetch_error is not None:
            raise self.fetch_error
        if gist_id not in self.gists:
            raise GistNotFoundError(message="Please check your Gist id.")
        return self.gists[gist_id]

    def create(
        self,
        files: FileSet,
        visibility: Visibility = Visibility.PRIVATE,
        description: str = "",
    ) -> RemoteDocument:
        self.calls.append(("create", dict(files), visibility, description))
        if self.write_error is not None:
            raise self.write_error
        gist = RemoteDocument(
            id=next(self._ids),
            files={name: entry for name, entry in files.items() if entry is not None},
            description=description,
            public=visibility.is_public,
        )
        self.gists[gist.id] = gist
        return gist

    def update(self, gist_id: str, files: FileSet) -> RemoteDocument:
        self.calls.append(("update", gist_id, dict(files)))
        if self.write_error is not None:
            raise self.write_error
        if gist_id not in self.gists:
            raise GistNotFoundError(gist_id)
        merged = dict(self.gists[gist_id].files)
        for name, entry in files.items():
            if entry is None:
                merged.pop(name, None)
            else:
                merged[name] = entry
        gist = RemoteDocument(id=gist_id, files=merged)
        self.gists[gist_id] = gist
        return gist

    def delete(self, gist_id: str) -> None:
        self.calls.append(("delete", gist_id))
        if gist_id not in self.gists:
            raise GistNotFoundError(gist_id)
        del self.gists[gist_id]

    # GistClient extras used by the CLI
    def find_gist_by_description(self, description: str) -> Optional[RemoteDocument]:
        self.calls.append(("find", description))
        for gist in self.gists.values():
            if gist.description == description:
                return gist
        return None

    def read_file(self, gist: RemoteDocument, filename: str) -> str:
        return gist.files[filename].content or ""

    def test_token(self) -> bool:
        return True

    def close(self) -> None:
        pass

    def __enter__(self) -> "FakeGistStore":
        return self

    def __exit__(self, *exc_info) -> None:
        pass


@pytest.fixture
def store() -> FakeGistStore:
    return FakeGistStore()


@pytest.fixture(autouse=True)
def app_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the app data dir at a temporary directory and clear env overrides."""
    home = tmp_path / "settings-sync"
    monkeypatch.setenv("SETTINGS_SYNC_HOME", str(home))
    for env_var in (
        "SETTINGS_SYNC_GIST_ID",
        "SETTINGS_SYNC_PROXY",
        "HTTPS_PROXY",
        "https_proxy",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(env_var, raising=False)
    return home
