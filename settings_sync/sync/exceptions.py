"""
Custom exceptions for Gist synchronization.

The three concrete errors map to the three things a user can fix:
the access token, the Gist id, or the network connection.
"""

from typing import Optional


class SyncError(Exception):
    """
    Generic synchronization error.

    Base class for all sync-related errors.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(SyncError):
    """
    Raised when the GitHub token is invalid or missing.
    """

    def __init__(
        self,
        message: str = "Please check your GitHub access token.",
        status_code: Optional[int] = 401,
    ):
        super().__init__(message, status_code)


class GistNotFoundError(SyncError):
    """
    Raised when the referenced Gist does not exist.
    """

    def __init__(
        self,
        gist_id: Optional[str] = None,
        message: Optional[str] = None,
        status_code: Optional[int] = 404,
    ):
        if message is None:
            message = (
                f"No such id in Gist: {gist_id}" if gist_id
                else "Please check your Gist id."
            )
        super().__init__(message, status_code)
        self.gist_id = gist_id


class TransportError(SyncError):
    """
    Raised on connectivity problems, timeouts and unexpected HTTP failures.
    """

    def __init__(
        self,
        message: str = "Please check your Internet connection.",
        status_code: Optional[int] = None,
    ):
        super().__init__(message, status_code)


class NothingToUploadError(SyncError):
    """
    Raised when a new Gist would be created without any file content.
    """

    def __init__(self, message: str = "No local file has content to upload."):
        super().__init__(message)
