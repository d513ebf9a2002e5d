"""CLI runtime resolution helpers.

This module isolates auth token prompting, runtime source assembly, secure
token persistence, and batching confirmation from the command wiring layer.
"""

from __future__ import annotations

from typing import Callable, Protocol

import typer

from .credentials import create_credential_store
from .errors import PublishStageError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by CLI runtime resolution."""

    def get_auth_token(self) -> str | None:
        """Return currently stored auth token, if available."""

    def set_auth_token(self, token: str) -> None:
        """Persist auth token value in secure storage."""


def _prompt_hidden_token(label: str) -> str | None:
    """Prompt for a token with hidden input and normalize blank answers to `None`."""

    return normalize_optional_string(
        typer.prompt(
            label,
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_token_runtime_sources(
    token: str | None,
    prompt_token: bool,
    store_token: bool,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for the auth token."""

    runtime_cli_values: dict[str, str] = {}
    normalized_token = normalize_optional_string(token)
    if normalized_token is not None:
        runtime_cli_values["auth_token"] = normalized_token
    elif prompt_token:
        prompted = _prompt_hidden_token("Auth token (hidden; leave blank to skip)")
        if prompted is not None:
            runtime_cli_values["auth_token"] = prompted

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_token = credential_store.get_auth_token()
    if stored_token is not None:
        runtime_secure_values["auth_token"] = stored_token

    if "auth_token" in runtime_cli_values and store_token:
        try:
            credential_store.set_auth_token(runtime_cli_values["auth_token"])
            typer.echo("Stored auth token in secure credential storage.")
        except Exception as exc:
            raise PublishStageError(
                stage="credentials",
                detail=f"Failed to store auth token securely: {exc}",
                hint=(
                    "Install and configure a keyring backend, or rerun with "
                    "`--no-store-token` for one-off usage."
                ),
            ) from exc

    return runtime_cli_values, runtime_secure_values


def confirm_batching_prompt(image_count: int, payload_bytes: int) -> bool:
    """Ask whether a mid-sized chapter should be uploaded in batches."""

    size_mib = payload_bytes / (1024 * 1024)
    return typer.confirm(
        f"{image_count} images ({size_mib:.1f} MiB) may exceed request limits. "
        "Upload in batches?",
        default=True,
    )
