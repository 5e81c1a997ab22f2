"""
GitHub Gist API client for settings synchronization.

Uses GitHub REST API v3 for Gist operations. Every operation issues a
single request: failures are classified, never retried.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

import requests

from settings_sync.sync.exceptions import (
    GistNotFoundError,
    SyncError,
    TransportError,
    UnauthorizedError,
)
from settings_sync.sync.models import (
    FileSet,
    RemoteDocument,
    Visibility,
    serialize_files,
)
from settings_sync.sync.store import RemoteStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GistConfig:
    """Connection settings for a GistClient."""
    token: Optional[str] = None
    proxy: Optional[str] = None
    timeout: float = 5.0  # seconds
    api_base: str = "https://api.github.com"


class GistClient(RemoteStore):
    """
    GitHub Gist API client.

    Handles authentication, proxying and error classification.
    """

    USER_AGENT = "settings-sync"

    def __init__(self, config: GistConfig):
        """
        Initialize Gist client.

        Args:
            config: Token, proxy and timeout settings. The token may be
                omitted for anonymous read access.
        """
        self.config = config
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.USER_AGENT,
        })
        if config.token:
            self.session.headers["Authorization"] = f"token {config.token}"
        if config.proxy:
            self.session.proxies.update({"http": config.proxy, "https": config.proxy})

    @property
    def token(self) -> Optional[str]:
        return self.config.token

    @property
    def proxy(self) -> Optional[str]:
        return self.config.proxy

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "GistClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def fetch(self, gist_id: str) -> RemoteDocument:
        """
        Get Gist by ID.

        Args:
            gist_id: Gist ID

        Returns:
            The Gist as a RemoteDocument. Truncated files are read in full
            from their raw URL

        Raises:
            GistNotFoundError: If the Gist does not exist
            UnauthorizedError: If the token is rejected
            TransportError: On connection problems
        """
        response = self._request("GET", f"{self.config.api_base}/gists/{gist_id}")
        gist = RemoteDocument.from_api(response.json())

        # Diffs must compare full contents, not the truncated preview.
        for filename, entry in list(gist.files.items()):
            if entry is not None and entry.truncated and entry.raw_url:
                raw = self._request("GET", entry.raw_url)
                gist.files[filename] = replace(entry, content=raw.text, truncated=False)
        return gist

    def create(
        self,
        files: FileSet,
        visibility: Visibility = Visibility.PRIVATE,
        description: str = "",
    ) -> RemoteDocument:
        """
        Create a new Gist.

        Args:
            files: Files to store
            visibility: Public or private (default: private)
            description: Gist description

        Returns:
            The created Gist
        """
        payload = {
            "description": description,
            "public": visibility.is_public,
            "files": serialize_files(files),
        }
        response = self._request("POST", f"{self.config.api_base}/gists", json=payload)
        gist = RemoteDocument.from_api(response.json())
        logger.info("Created gist %s with %d file(s)", gist.id, len(payload["files"]))
        return gist

    def update(self, gist_id: str, files: FileSet) -> RemoteDocument:
        """
        Update existing Gist.

        Args:
            gist_id: Gist ID
            files: Files to write; None values delete the file

        Returns:
            Updated Gist
        """
        payload = {"files": serialize_files(files)}
        response = self._request(
            "PATCH",
            f"{self.config.api_base}/gists/{gist_id}",
            json=payload,
        )
        logger.info("Updated gist %s (%d file change(s))", gist_id, len(payload["files"]))
        return RemoteDocument.from_api(response.json())

    def delete(self, gist_id: str) -> None:
        """
        Delete Gist.

        Args:
            gist_id: Gist ID
        """
        self._request("DELETE", f"{self.config.api_base}/gists/{gist_id}")
        logger.info("Deleted gist %s", gist_id)

    def list_gists(self, per_page: int = 100) -> list[RemoteDocument]:
        """
        List authenticated user's Gists.

        Args:
            per_page: Results per page (max 100)

        Returns:
            List of Gists. File contents are not included by the API.
        """
        response = self._request(
            "GET",
            f"{self.config.api_base}/gists",
            params={"per_page": per_page},
        )
        return [RemoteDocument.from_api(data) for data in response.json()]

    def find_gist_by_description(self, description: str) -> Optional[RemoteDocument]:
        """
        Find Gist by description.

        Args:
            description: Gist description to search for

        Returns:
            The first matching Gist, None otherwise
        """
        for gist in self.list_gists():
            if gist.description == description:
                return gist
        return None

    def get_file_content(self, gist_id: str, filename: str) -> str:
        """
        Get content of a specific file from Gist.

        Args:
            gist_id: Gist ID
            filename: Filename

        Returns:
            File content as string

        Raises:
            GistNotFoundError: If the Gist or the file does not exist
        """
        gist = self.fetch(gist_id)
        return self.read_file(gist, filename)

    def read_file(self, gist: RemoteDocument, filename: str) -> str:
        """
        Read a file of an already fetched Gist.

        Large files come back truncated; their full content is read from
        the raw URL.
        """
        entry = gist.files.get(filename)
        if entry is None:
            raise GistNotFoundError(
                gist.id, message=f"File '{filename}' not found in Gist {gist.id}"
            )

        if (entry.content is None or entry.truncated) and entry.raw_url:
            response = self._request("GET", entry.raw_url)
            return response.text

        return entry.content or ""

    def test_token(self) -> bool:
        """
        Test if token is valid.

        Returns:
            True if token is valid
        """
        try:
            self._request("GET", f"{self.config.api_base}/user")
        except SyncError as e:
            logger.debug("Token check failed: %s", e)
            return False
        return True

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Make a single HTTP request and classify failures.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            UnauthorizedError: On 401
            GistNotFoundError: On 404
            TransportError: On any other failure
        """
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise TransportError() from e

        status = response.status_code
        if status == 401:
            raise UnauthorizedError()
        if status == 404:
            raise GistNotFoundError(message="Please check your Gist id.")
        if status >= 400:
            logger.debug("%s %s returned HTTP %d", method, url, status)
            raise TransportError(status_code=status)
        return response
