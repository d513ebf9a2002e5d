"""Integration tests for the offline `plan` command and the `credentials` command."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from chapterpush.cli import app
from tests.fakes import InMemoryCredentialStore


def _urls(count: int) -> list[str]:
    """Return distinct hosted image URLs."""

    return [f"https://cdn.example.com/page-{number}.png" for number in range(1, count + 1)]


def test_plan_shows_ask_decision_and_batch_rows() -> None:
    """Twelve images should need confirmation and split into three batches."""

    runner = CliRunner()

    result = runner.invoke(app, ["plan", *_urls(12)])

    assert result.exit_code == 0, result.output
    assert "Images: 12 (" in result.output
    assert "Batching decision: ask" in result.output
    assert "0. create images 1-5 (5 images," in result.output
    assert "1. append images 6-10 (5 images," in result.output
    assert "2. append images 11-12 (2 images," in result.output


def test_plan_respects_batch_size_option_and_force_threshold() -> None:
    """Twenty-three images with batch size four should be forced into six batches."""

    runner = CliRunner()

    result = runner.invoke(app, ["plan", *_urls(23), "--batch-size", "4"])

    assert result.exit_code == 0, result.output
    assert "Batching decision: force" in result.output
    assert "5. append images 21-23 (3 images," in result.output


def test_plan_reads_thresholds_from_config(tmp_path: Path) -> None:
    """Config thresholds should drive the offline batching decision."""

    config_path = tmp_path / "chapterpush.yaml"
    config_path.write_text(
        "base_url: https://studio.example.com\nask_image_count: 2\nforce_image_count: 3\n",
        encoding="utf-8",
    )
    runner = CliRunner()

    result = runner.invoke(app, ["plan", *_urls(3), "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert "Batching decision: force" in result.output


def test_credentials_status_reports_availability_and_token_state(
    credential_store: InMemoryCredentialStore,
) -> None:
    """Status output should never print the token itself."""

    runner = CliRunner()

    empty = runner.invoke(app, ["credentials"])
    credential_store.set_auth_token("secret-token")
    stored = runner.invoke(app, ["credentials"])

    assert empty.exit_code == 0, empty.output
    assert "Secure credential storage: available" in empty.output
    assert "Stored auth token: not set" in empty.output
    assert "Stored auth token: present" in stored.output
    assert "secret-token" not in stored.output


def test_credentials_set_and_clear_token(credential_store: InMemoryCredentialStore) -> None:
    """Setting stores the prompted token and clearing removes it."""

    runner = CliRunner()

    set_result = runner.invoke(app, ["credentials", "--set-token"], input="typed-token\n")
    assert set_result.exit_code == 0, set_result.output
    assert "Auth token stored in secure credential storage." in set_result.output
    assert credential_store.get_auth_token() == "typed-token"

    clear_result = runner.invoke(app, ["credentials", "--clear-token"])
    assert clear_result.exit_code == 0, clear_result.output
    assert "Stored auth token cleared" in clear_result.output

    again = runner.invoke(app, ["credentials", "--clear-token"])
    assert "No stored auth token found" in again.output


def test_credentials_set_token_reports_unavailable_backend(
    credential_store: InMemoryCredentialStore,
) -> None:
    """A missing keyring backend should fail at the credentials stage."""

    credential_store._available = False
    runner = CliRunner()

    result = runner.invoke(app, ["credentials", "--set-token"], input="typed-token\n")

    assert result.exit_code == 1
    assert "credentials failed at stage `credentials`" in result.output
    assert "typed-token" not in result.output
