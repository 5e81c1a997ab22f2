"""
Remote store interface used by the sync orchestrator.

GistClient is the production implementation. Tests provide in-memory
stores implementing the same methods.
"""

from abc import ABC, abstractmethod

from settings_sync.sync.models import FileSet, RemoteDocument, Visibility


class RemoteStore(ABC):
    """
    Base class for a store of Gist-like documents.

    Implementations raise the errors from settings_sync.sync.exceptions:
    UnauthorizedError, GistNotFoundError or TransportError.
    """

    @abstractmethod
    def fetch(self, gist_id: str) -> RemoteDocument:
        """
        Fetch a document by id.

        Raises:
            GistNotFoundError, UnauthorizedError, TransportError
        """
        pass

    @abstractmethod
    def create(
        self,
        files: FileSet,
        visibility: Visibility = Visibility.PRIVATE,
        description: str = "",
    ) -> RemoteDocument:
        """
        Create a new document holding ``files``.

        Raises:
            UnauthorizedError, TransportError
        """
        pass

    @abstractmethod
    def update(self, gist_id: str, files: FileSet) -> RemoteDocument:
        """
        Apply ``files`` to an existing document. None values delete files.

        Raises:
            GistNotFoundError, UnauthorizedError, TransportError
        """
        pass

    @abstractmethod
    def delete(self, gist_id: str) -> None:
        """Delete a document."""
        pass
