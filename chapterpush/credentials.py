"""Secure credential storage helpers for the chapterpush CLI.

Responsibilities:
- Persist the content-service auth token in an OS-backed secure credential store.
- Provide deterministic read/write/delete operations for the token.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for auth token persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.backends import fail


_DEFAULT_SERVICE_NAME = "chapterpush"
_DEFAULT_ACCOUNT_NAME = "auth_token"


class CredentialStore:
    """Interface for secure auth token operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_auth_token(self) -> str | None:
        """Load the stored auth token from secure storage, when available."""

        raise NotImplementedError

    def set_auth_token(self, token: str) -> None:
        """Persist an auth token in secure storage."""

        raise NotImplementedError

    def clear_auth_token(self) -> bool:
        """Delete a stored auth token and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME
    account_name: str = _DEFAULT_ACCOUNT_NAME

    def is_available(self) -> bool:
        """Return `True` when a usable keyring backend is configured."""

        return not isinstance(keyring.get_keyring(), fail.Keyring)

    def get_auth_token(self) -> str | None:
        """Get a normalized auth token from keyring, returning `None` when missing."""

        if not self.is_available():
            return None
        value = keyring.get_password(self.service_name, self.account_name)
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def set_auth_token(self, token: str) -> None:
        """Persist a normalized auth token in keyring or raise when unavailable."""

        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable because no keyring backend "
                "is configured. Install or configure a keyring backend to persist tokens."
            )

        normalized = token.strip()
        if not normalized:
            raise ValueError("Auth token must be a non-empty string.")
        keyring.set_password(self.service_name, self.account_name, normalized)

    def clear_auth_token(self) -> bool:
        """Remove the stored auth token from keyring and report if one was present."""

        existing = self.get_auth_token()
        if existing is None:
            return False

        keyring.delete_password(self.service_name, self.account_name)
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
