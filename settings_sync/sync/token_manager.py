"""
Secure GitHub token storage using system credential manager.

Uses keyring library for cross-platform secure storage.
Falls back to a token file in the app data directory when no keyring
backend is usable.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError

from settings_sync.config.user_config import get_app_data_dir

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Manage GitHub Personal Access Token securely.

    Priority:
    1. Environment variable: GITHUB_TOKEN
    2. System keyring (secure)
    3. Token file (fallback)
    """

    SERVICE_NAME = "settings-sync"
    USERNAME = "github-gist-token"
    ENV_VAR = "GITHUB_TOKEN"

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize token manager.

        Args:
            config_dir: Configuration directory (default: app data dir)
        """
        self.config_dir = config_dir or get_app_data_dir()
        self.token_file = self.config_dir / "gist_token.txt"

    def get_token(self) -> Optional[str]:
        """
        Get GitHub token from secure storage.

        Returns:
            GitHub token or None if not found
        """
        token = os.getenv(self.ENV_VAR)
        if token:
            return token

        try:
            token = keyring.get_password(self.SERVICE_NAME, self.USERNAME)
        except KeyringError as e:
            logger.debug("Keyring lookup failed: %s", e)
            token = None
        if token:
            return token

        if self.token_file.exists():
            return self.token_file.read_text(encoding="utf-8").strip() or None

        return None

    def set_token(self, token: str) -> str:
        """
        Store GitHub token securely.

        Prefers keyring, falls back to the token file.

        Args:
            token: GitHub Personal Access Token

        Returns:
            Human-readable storage location

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("Token cannot be empty")

        try:
            keyring.set_password(self.SERVICE_NAME, self.USERNAME, token)
        except KeyringError as e:
            logger.warning("Could not store token in keyring, using token file: %s", e)
        else:
            if self.token_file.exists():
                self.token_file.unlink()
            return self.get_storage_location()

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(token, encoding="utf-8")
        # rw------- (no-op on Windows)
        self.token_file.chmod(0o600)
        return self.get_storage_location()

    def delete_token(self) -> bool:
        """
        Delete stored token.

        Returns:
            True if a stored token was removed
        """
        deleted = False

        try:
            keyring.delete_password(self.SERVICE_NAME, self.USERNAME)
            deleted = True
        except KeyringError as e:
            logger.debug("No token removed from keyring: %s", e)

        if self.token_file.exists():
            self.token_file.unlink()
            deleted = True

        return deleted

    def has_token(self) -> bool:
        return self.get_token() is not None

    def get_storage_location(self) -> str:
        """
        Get description of where token is stored.

        Returns:
            Human-readable storage location
        """
        if os.getenv(self.ENV_VAR):
            return f"Environment variable: {self.ENV_VAR}"

        try:
            if keyring.get_password(self.SERVICE_NAME, self.USERNAME):
                return f"System keyring ({keyring.get_keyring().__class__.__name__})"
        except KeyringError:
            pass

        if self.token_file.exists():
            return f"Token file: {self.token_file}"

        return "Not configured"
