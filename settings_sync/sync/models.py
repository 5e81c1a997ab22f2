"""
Data model shared by the differ, the orchestrator and the Gist client.

A file set maps a Gist filename to a FileEntry, or to None when the
file must be deleted from the Gist (a tombstone).
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Visibility(Enum):
    """Gist visibility."""
    PUBLIC = "public"
    PRIVATE = "private"

    @property
    def is_public(self) -> bool:
        return self is Visibility.PUBLIC

    @classmethod
    def from_public_flag(cls, public: bool) -> "Visibility":
        return cls.PUBLIC if public else cls.PRIVATE


@dataclass(frozen=True)
class FileEntry:
    """
    A single Gist file.

    Only ``content`` takes part in comparisons; the remaining fields are
    metadata reported by the API for remote files.
    """
    content: Optional[str] = None
    size: Optional[int] = field(default=None, compare=False)
    raw_url: Optional[str] = field(default=None, compare=False)
    truncated: bool = field(default=False, compare=False)

    @property
    def has_content(self) -> bool:
        """Empty or missing content never counts as a real file."""
        return bool(self.content)

    @classmethod
    def from_api(cls, data: Optional[dict[str, Any]]) -> Optional["FileEntry"]:
        if data is None:
            return None
        return cls(
            content=data.get("content"),
            size=data.get("size"),
            raw_url=data.get("raw_url"),
            truncated=bool(data.get("truncated", False)),
        )


FileSet = Mapping[str, Optional[FileEntry]]


@dataclass(frozen=True)
class Upload:
    """A local file to be stored in the Gist under ``remote_name``."""
    remote_name: str
    content: str


class ChangeSet(Mapping[str, Optional[FileEntry]]):
    """
    Immutable set of Gist mutations.

    Keys map to the full replacement FileEntry for creations and updates,
    or to None for deletions. A ChangeSet is never empty: "no changes" is
    expressed by the differ returning None.
    """

    def __init__(self, changes: Mapping[str, Optional[FileEntry]]):
        if not changes:
            raise ValueError("ChangeSet requires at least one change")
        self._changes = dict(changes)

    def __getitem__(self, key: str) -> Optional[FileEntry]:
        return self._changes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __repr__(self) -> str:
        return f"ChangeSet({self._changes!r})"

    @property
    def deletions(self) -> list[str]:
        return [name for name, entry in self._changes.items() if entry is None]

    @property
    def writes(self) -> list[str]:
        return [name for name, entry in self._changes.items() if entry is not None]


@dataclass
class RemoteDocument:
    """A Gist as returned by the remote store."""
    id: str
    files: dict[str, Optional[FileEntry]] = field(default_factory=dict)
    description: Optional[str] = None
    public: bool = False
    html_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def visibility(self) -> Visibility:
        return Visibility.from_public_flag(self.public)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RemoteDocument":
        """
        Build a RemoteDocument from a GitHub Gist API response.

        Args:
            data: Decoded JSON body of a Gist response

        Returns:
            RemoteDocument instance
        """
        files = {
            filename: FileEntry.from_api(file_data)
            for filename, file_data in (data.get("files") or {}).items()
        }
        return cls(
            id=data["id"],
            files=files,
            description=data.get("description"),
            public=bool(data.get("public", False)),
            html_url=data.get("html_url"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


def serialize_files(files: FileSet) -> dict[str, Optional[dict[str, str]]]:
    """
    Convert a file set to the Gist API ``files`` payload.

    Tombstones are kept as None, which the API reads as "delete this file".
    """
    payload: dict[str, Optional[dict[str, str]]] = {}
    for filename, entry in files.items():
        if entry is None:
            payload[filename] = None
        else:
            payload[filename] = {"content": entry.content or ""}
    return payload
