"""Tests for SyncOrchestrator."""

import pytest

from settings_sync.sync.exceptions import (
    GistNotFoundError,
    NothingToUploadError,
    TransportError,
    UnauthorizedError,
)
from settings_sync.sync.models import FileEntry, Upload, Visibility
from settings_sync.sync.orchestrator import Existence, SyncOrchestrator
from tests.conftest import FakeGistStore


UPLOADS = [
    Upload("settings.json", '{"editor.fontSize": 14}'),
    Upload("extensions.json", '["ms-python.python"]'),
]


class TestExists:
    """Tests for the existence check."""

    def test_no_id_is_absent_without_fetch(self, store: FakeGistStore) -> None:
        check = SyncOrchestrator(store).exists(None)

        assert check.state is Existence.ABSENT
        assert store.calls == []

    def test_empty_id_is_absent(self, store: FakeGistStore) -> None:
        assert SyncOrchestrator(store).exists("").state is Existence.ABSENT

    def test_existing_gist(self, store: FakeGistStore) -> None:
        gist = store.add("abc", {"a.json": "1"})

        check = SyncOrchestrator(store).exists("abc")

        assert check.state is Existence.EXISTS
        assert check.document is gist

    def test_not_found_is_absent(self, store: FakeGistStore) -> None:
        check = SyncOrchestrator(store).exists("missing")

        assert check.state is Existence.ABSENT
        assert check.error is None

    def test_unauthorized_is_failed(self, store: FakeGistStore) -> None:
        store.fetch_error = UnauthorizedError()

        check = SyncOrchestrator(store).exists("abc")

        assert check.state is Existence.FAILED
        assert isinstance(check.error, UnauthorizedError)

    def test_transport_error_is_failed(self, store: FakeGistStore) -> None:
        store.fetch_error = TransportError()

        check = SyncOrchestrator(store).exists("abc")

        assert check.state is Existence.FAILED
        assert isinstance(check.error, TransportError)


class TestReconcileExisting:
    """Tests for reconciling an existing Gist."""

    def test_updates_changed_files(self, store: FakeGistStore) -> None:
        store.add("abc", {"settings.json": "{}", "old.json": "x"})

        gist = SyncOrchestrator(store).reconcile("abc", UPLOADS)

        assert store.writes == [(
            "update",
            "abc",
            {
                "settings.json": FileEntry(content='{"editor.fontSize": 14}'),
                "old.json": None,
                "extensions.json": FileEntry(content='["ms-python.python"]'),
            },
        )]
        assert set(gist.files) == {"settings.json", "extensions.json"}

    def test_unchanged_gist_is_returned_without_write(self, store: FakeGistStore) -> None:
        existing = store.add("abc", {
            "settings.json": '{"editor.fontSize": 14}',
            "extensions.json": '["ms-python.python"]',
        })

        gist = SyncOrchestrator(store).reconcile("abc", UPLOADS)

        assert gist is existing
        assert store.writes == []

    def test_protected_files_survive(self, store: FakeGistStore) -> None:
        store.add("abc", {"keybindings.json": "[]", "extensions.json": '["ms-python.python"]'})

        gist = SyncOrchestrator(store).reconcile("abc", [Upload("extensions.json", '["ms-python.python"]')])

        assert store.writes == []
        assert "keybindings.json" in gist.files

    def test_fetches_once(self, store: FakeGistStore) -> None:
        store.add("abc", {"a.json": "1"})

        SyncOrchestrator(store).reconcile("abc", [Upload("a.json", "2")])

        assert [call for call in store.calls if call[0] == "fetch"] == [("fetch", "abc")]


class TestReconcileMissing:
    """Tests for reconciling when no Gist exists."""

    def test_creates_when_no_id(self, store: FakeGistStore) -> None:
        gist = SyncOrchestrator(store).reconcile(None, UPLOADS, upsert=True)

        assert len(store.writes) == 1
        call, files, visibility, description = store.writes[0]
        assert call == "create"
        assert set(files) == {"settings.json", "extensions.json"}
        assert visibility is Visibility.PRIVATE
        assert description == SyncOrchestrator.GIST_DESCRIPTION
        assert gist.id in store.gists

    def test_creates_when_not_found(self, store: FakeGistStore) -> None:
        gist = SyncOrchestrator(store).reconcile("missing", UPLOADS)

        assert store.writes[0][0] == "create"
        assert gist.id != "missing"

    def test_creates_public_gist(self, store: FakeGistStore) -> None:
        gist = SyncOrchestrator(store, visibility=Visibility.PUBLIC).reconcile(None, UPLOADS)

        assert gist.public is True

    def test_create_skips_empty_files(self, store: FakeGistStore) -> None:
        """Empty local files are left out of a new Gist."""
        gist = SyncOrchestrator(store).reconcile(
            None, [Upload("a.json", "1"), Upload("empty.json", "")]
        )

        assert store.writes[0][1] == {"a.json": FileEntry(content="1")}
        assert set(gist.files) == {"a.json"}

    def test_create_with_only_empty_files_writes_nothing(self, store: FakeGistStore) -> None:
        with pytest.raises(NothingToUploadError):
            SyncOrchestrator(store).reconcile(None, [Upload("empty.json", "")])

        assert store.writes == []

    def test_not_found_without_upsert(self, store: FakeGistStore) -> None:
        with pytest.raises(GistNotFoundError) as exc_info:
            SyncOrchestrator(store).reconcile("missing", UPLOADS, upsert=False)

        assert exc_info.value.gist_id == "missing"
        assert "missing" in str(exc_info.value)
        assert store.writes == []

    def test_no_id_without_upsert(self, store: FakeGistStore) -> None:
        with pytest.raises(GistNotFoundError):
            SyncOrchestrator(store).reconcile(None, UPLOADS, upsert=False)

        assert store.calls == []


class TestReconcileErrors:
    """Tests for error propagation."""

    def test_unauthorized_without_upsert_is_not_reported_as_missing(self, store: FakeGistStore) -> None:
        store.fetch_error = UnauthorizedError()

        with pytest.raises(UnauthorizedError):
            SyncOrchestrator(store).reconcile("abc", UPLOADS, upsert=False)

        assert store.writes == []

    def test_transport_error_without_upsert(self, store: FakeGistStore) -> None:
        store.fetch_error = TransportError()

        with pytest.raises(TransportError):
            SyncOrchestrator(store).reconcile("abc", UPLOADS, upsert=False)

    def test_unauthorized_raised_after_failed_create(self, store: FakeGistStore) -> None:
        store.fetch_error = UnauthorizedError()
        store.write_error = UnauthorizedError()

        with pytest.raises(UnauthorizedError):
            SyncOrchestrator(store).reconcile("abc", UPLOADS)

    def test_connection_error_after_unauthorized_fetch_is_not_hidden(self, store: FakeGistStore) -> None:
        """A create failing for another reason surfaces its own error."""
        fetch_error = UnauthorizedError()
        store.fetch_error = fetch_error
        store.write_error = TransportError()

        with pytest.raises(TransportError) as exc_info:
            SyncOrchestrator(store).reconcile("abc", UPLOADS)

        assert exc_info.value.__cause__ is fetch_error

    def test_failed_fetch_with_nothing_to_upload_raises_fetch_error(self, store: FakeGistStore) -> None:
        store.fetch_error = UnauthorizedError()

        with pytest.raises(UnauthorizedError):
            SyncOrchestrator(store).reconcile("abc", [Upload("empty.json", "")])

        assert store.writes == []

    def test_transport_error_surfaces_after_failed_create(self, store: FakeGistStore) -> None:
        fetch_error = TransportError()
        store.fetch_error = fetch_error
        store.write_error = TransportError(status_code=502)

        with pytest.raises(TransportError) as exc_info:
            SyncOrchestrator(store).reconcile("abc", UPLOADS)

        assert exc_info.value.status_code == 502
        assert exc_info.value.__cause__ is fetch_error

    def test_failed_fetch_falls_back_to_create(self, store: FakeGistStore) -> None:
        store.fetch_error = TransportError()

        gist = SyncOrchestrator(store).reconcile("abc", UPLOADS)

        assert store.writes[0][0] == "create"
        assert gist.id in store.gists

    def test_strict_mode_never_creates_after_failed_fetch(self, store: FakeGistStore) -> None:
        store.fetch_error = TransportError()

        with pytest.raises(TransportError):
            SyncOrchestrator(store, strict_existence=True).reconcile("abc", UPLOADS)

        assert store.writes == []

    def test_strict_mode_still_creates_when_absent(self, store: FakeGistStore) -> None:
        SyncOrchestrator(store, strict_existence=True).reconcile("missing", UPLOADS)

        assert store.writes[0][0] == "create"

    def test_update_error_propagates(self, store: FakeGistStore) -> None:
        store.add("abc", {"a.json": "1"})
        store.write_error = TransportError()

        with pytest.raises(TransportError):
            SyncOrchestrator(store).reconcile("abc", [Upload("a.json", "2")])


def test_delete(store: FakeGistStore) -> None:
    store.add("abc", {"a.json": "1"})

    SyncOrchestrator(store).delete("abc")

    assert "abc" not in store.gists
