"""Secure credential storage for Remote Transfer.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) so URIs can omit the password.
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError

from src.config.target import ConnectionTarget


class CredentialManager:
    """Secure credential storage using system keyring."""

    SERVICE_NAME = "remote-transfer"

    def _make_key(self, target: ConnectionTarget) -> str:
        """
        Create a unique key for the credential.

        Args:
            target: Connection target

        Returns:
            Unique key string
        """
        return f"{target.scheme.value}://{target.username}@{target.address}"

    def save_password(self, target: ConnectionTarget, password: str) -> bool:
        """
        Save a password securely.

        Args:
            target: Connection target the password belongs to
            password: Password to save

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(target), password)
            return True
        except KeyringError:
            return False

    def get_password(self, target: ConnectionTarget) -> Optional[str]:
        """
        Retrieve saved password.

        Args:
            target: Connection target

        Returns:
            Password string or None if not found
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(target))
        except KeyringError:
            return None

    def delete_password(self, target: ConnectionTarget) -> bool:
        """
        Remove saved password.

        Args:
            target: Connection target

        Returns:
            True if deleted successfully, False otherwise
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(target))
            return True
        except KeyringError:
            return False

    def resolve(self, target: ConnectionTarget) -> ConnectionTarget:
        """
        Fill in a missing password from the keyring.

        Args:
            target: Parsed connection target

        Returns:
            The same target if it already carries a password or nothing
            is stored, otherwise a copy with the stored password
        """
        if target.password:
            return target

        stored = self.get_password(target)
        if stored is None:
            return target
        return target.with_password(stored)
