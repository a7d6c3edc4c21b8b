"""
Storage of the Supabase API key in the operating system keyring.
"""

from __future__ import annotations

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)


KEYRING_SERVICE_NAME = "lessonslots"


class CredentialStore:
    """
    Keeps one API key per Supabase project URL in the keyring.

    Keyring failures are logged and reported as "no stored key" so that
    the key can still come from the config file or the environment.
    """

    def __init__(self, service_name: str = KEYRING_SERVICE_NAME):
        self.service_name = service_name

    def get_api_key(self, url: str) -> Optional[str]:
        """Return the stored key for ``url``, or None."""
        try:
            return keyring.get_password(self.service_name, url)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            logger.warning("Reading credentials from keyring failed: %s", exc)
            return None

    def set_api_key(self, url: str, api_key: str) -> bool:
        """
        Store the key for ``url``.

        Returns:
            True if the key was stored, False if the keyring is unavailable
        """
        try:
            keyring.set_password(self.service_name, url, api_key)
            return True
        except KeyringError as exc:
            logger.warning("Writing credentials to keyring failed: %s", exc)
            return False

    def delete_api_key(self, url: str) -> bool:
        """
        Remove the key for ``url``.

        Returns:
            True if a key was removed
        """
        try:
            keyring.delete_password(self.service_name, url)
            return True
        except PasswordDeleteError:
            return False
        except KeyringError as exc:  # pragma: no cover - environment dependent
            logger.warning("Could not remove credentials from keyring: %s", exc)
            return False
