"""
Reconcile a set of local files with a single Gist.

One call to ``SyncOrchestrator.reconcile`` performs at most one read and
at most one write against the remote store.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from settings_sync.sync.differ import build_file_set, diff_files
from settings_sync.sync.exceptions import (
    GistNotFoundError,
    NothingToUploadError,
    SyncError,
    UnauthorizedError,
)
from settings_sync.sync.models import RemoteDocument, Upload, Visibility
from settings_sync.sync.store import RemoteStore

logger = logging.getLogger(__name__)


class Existence(Enum):
    EXISTS = "exists"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True)
class ExistenceCheck:
    """Outcome of looking up a Gist before reconciling it."""
    state: Existence
    document: Optional[RemoteDocument] = None
    error: Optional[SyncError] = None

    @classmethod
    def exists(cls, document: RemoteDocument) -> "ExistenceCheck":
        return cls(Existence.EXISTS, document=document)

    @classmethod
    def absent(cls) -> "ExistenceCheck":
        return cls(Existence.ABSENT)

    @classmethod
    def failed(cls, error: SyncError) -> "ExistenceCheck":
        return cls(Existence.FAILED, error=error)


class SyncOrchestrator:
    """
    Drives the fetch, diff, then create/update/no-op workflow.
    """

    GIST_DESCRIPTION = "VSCode's Settings - Syncing"

    def __init__(
        self,
        store: RemoteStore,
        visibility: Visibility = Visibility.PRIVATE,
        strict_existence: bool = False,
    ):
        """
        Initialize orchestrator.

        Args:
            store: Remote store holding the Gist
            visibility: Visibility of Gists created by upsert
            strict_existence: If True, a failed existence check (bad token,
                network failure) is raised instead of creating a new Gist
        """
        self.store = store
        self.visibility = visibility
        self.strict_existence = strict_existence

    def exists(self, gist_id: Optional[str]) -> ExistenceCheck:
        """
        Look up a Gist.

        A missing id or a 404 means the Gist is absent. Credential and
        transport failures are reported as FAILED with the error kept.
        """
        if not gist_id:
            return ExistenceCheck.absent()

        try:
            document = self.store.fetch(gist_id)
        except GistNotFoundError:
            logger.debug("Gist %s not found", gist_id)
            return ExistenceCheck.absent()
        except SyncError as e:
            logger.debug("Existence check for gist %s failed: %s", gist_id, e)
            return ExistenceCheck.failed(e)

        return ExistenceCheck.exists(document)

    def reconcile(
        self,
        gist_id: Optional[str],
        uploads: Iterable[Upload],
        upsert: bool = True,
    ) -> RemoteDocument:
        """
        Make the Gist match the given uploads.

        Args:
            gist_id: Gist ID (may be None when no Gist was created yet)
            uploads: Files that should end up in the Gist
            upsert: If True, create a new Gist when none exists

        Returns:
            The updated, created or unchanged Gist

        Raises:
            GistNotFoundError: If the Gist does not exist and upsert is False
            UnauthorizedError: If the token was rejected
            TransportError: If the Gist could not be reached
            NothingToUploadError: If a new Gist would hold no file content
        """
        check = self.exists(gist_id)
        local_files = build_file_set(uploads)

        if check.state is Existence.EXISTS:
            document = check.document
            change_set = diff_files(local_files, document.files)
            if change_set is None:
                logger.debug("Gist %s is up to date", document.id)
                return document

            logger.debug(
                "Updating gist %s: write %s, delete %s",
                document.id, change_set.writes, change_set.deletions,
            )
            return self.store.update(document.id, change_set)

        if check.state is Existence.FAILED and (self.strict_existence or not upsert):
            raise check.error

        if not upsert:
            raise GistNotFoundError(gist_id)

        # Empty local files never reach the Gist.
        new_files = {
            name: entry for name, entry in local_files.items()
            if entry is not None and entry.has_content
        }
        if not new_files:
            if check.error is not None:
                raise check.error
            raise NothingToUploadError()

        try:
            return self.store.create(
                new_files,
                visibility=self.visibility,
                description=self.GIST_DESCRIPTION,
            )
        except SyncError as e:
            if check.error is None:
                raise
            if isinstance(check.error, UnauthorizedError) and isinstance(e, UnauthorizedError):
                raise check.error from e
            raise e from check.error

    def delete(self, gist_id: str) -> None:
        """Delete a Gist."""
        self.store.delete(gist_id)
