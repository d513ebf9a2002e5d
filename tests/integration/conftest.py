"""Integration-test fixtures for deterministic content-service and keyring behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from chapterpush.client_factory import ClientFactory
from chapterpush.config import PublisherConfig
from chapterpush.upload.api import ChapterApiClient
from tests.fakes import FakeChapterService, InMemoryCredentialStore


@pytest.fixture
def fake_service(monkeypatch: pytest.MonkeyPatch) -> FakeChapterService:
    """Route every CLI-built API client to an in-memory content service."""

    service = FakeChapterService()

    def _create_api_client(config: PublisherConfig, **_: object) -> ChapterApiClient:
        """Build the API client exactly as configured, minus the network."""

        return ChapterApiClient(
            transport=service,
            endpoints=config.endpoints(),
            create_timeout_seconds=config.create_timeout_seconds,
            append_timeout_seconds=config.append_timeout_seconds,
            token_provider=config.token_provider(),
            tenant_host=config.tenant_host,
        )

    monkeypatch.setattr(ClientFactory, "create_api_client", staticmethod(_create_api_client))
    return service


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace OS keyring access with an in-memory store for every CLI test."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("chapterpush.cli.create_credential_store", lambda: store)
    return store


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Write a runtime YAML config without inter-batch pauses."""

    path = tmp_path / "chapterpush.yaml"
    path.write_text(
        "\n".join(
            [
                "base_url: https://studio.example.com",
                "tenant_host: tenant.example.com",
                "inter_batch_delay_seconds: 0",
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def page_dir(tmp_path: Path) -> Path:
    """Create a directory with three small PNG pages."""

    pages = tmp_path / "pages"
    pages.mkdir()
    for number in (1, 2, 3):
        (pages / f"page{number}.png").write_bytes(f"png-{number}".encode("ascii"))
    return pages
