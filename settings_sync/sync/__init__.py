"""
Gist reconciliation: diff, orchestration and the GitHub Gist client.
"""

from settings_sync.sync.differ import diff_files, is_protected
from settings_sync.sync.exceptions import (
    GistNotFoundError,
    NothingToUploadError,
    SyncError,
    TransportError,
    UnauthorizedError,
)
from settings_sync.sync.gist_client import GistClient, GistConfig
from settings_sync.sync.models import ChangeSet, FileEntry, RemoteDocument, Upload, Visibility
from settings_sync.sync.orchestrator import Existence, ExistenceCheck, SyncOrchestrator

__all__ = [
    "ChangeSet",
    "Existence",
    "ExistenceCheck",
    "FileEntry",
    "GistClient",
    "GistConfig",
    "GistNotFoundError",
    "NothingToUploadError",
    "RemoteDocument",
    "SyncError",
    "SyncOrchestrator",
    "TransportError",
    "UnauthorizedError",
    "Upload",
    "Visibility",
    "diff_files",
    "is_protected",
]
