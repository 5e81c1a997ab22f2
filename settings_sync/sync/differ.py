"""
Reconciliation diff between local files and the files stored in a Gist.

Only whole files are compared. A changed file is uploaded as a full
replacement, never as a patch.
"""

from collections.abc import Iterable
from typing import Optional

from settings_sync.sync.models import ChangeSet, FileEntry, FileSet, Upload


PROTECTED_SUBSTRINGS = ("keybindings", "settings")


def is_protected(filename: str) -> bool:
    """
    Check whether a remote file must survive a missing local copy.

    Editor settings and keybindings are never deleted from the Gist just
    because this machine does not upload them.
    """
    return any(marker in filename for marker in PROTECTED_SUBSTRINGS)


def build_file_set(uploads: Iterable[Upload]) -> dict[str, FileEntry]:
    """
    Build the local file set from a sequence of uploads.

    When two uploads share a remote name the last one wins.
    """
    return {upload.remote_name: FileEntry(content=upload.content) for upload in uploads}


def diff_files(local: FileSet, remote: FileSet) -> Optional[ChangeSet]:
    """
    Compute the Gist mutations needed to make ``remote`` match ``local``.

    Args:
        local: Desired files
        remote: Files currently stored in the Gist

    Returns:
        ChangeSet with updates/creations as FileEntry and deletions as
        None, or None when the Gist is already up to date
    """
    changes: dict[str, Optional[FileEntry]] = {}

    for filename, remote_entry in remote.items():
        if filename in local:
            local_entry = local[filename]
            # Empty local files are never authoritative.
            if local_entry is None or not local_entry.has_content:
                continue
            remote_content = remote_entry.content if remote_entry is not None else None
            if local_entry.content != remote_content:
                changes[filename] = local_entry
        elif not is_protected(filename):
            changes[filename] = None

    for filename, local_entry in local.items():
        if filename in remote:
            continue
        if local_entry is not None and local_entry.has_content:
            changes[filename] = local_entry

    if not changes:
        return None
    return ChangeSet(changes)
