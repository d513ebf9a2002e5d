"""Shared pytest fixtures for the chapterpush test suite."""

from __future__ import annotations

import pytest

from chapterpush.upload.api import ChapterApiClient, ChapterEndpoints
from tests.fakes import FakeChapterService, RecordingObserver, RecordingSleeper


@pytest.fixture
def chapter_service() -> FakeChapterService:
    """Provide an in-memory content service that accepts every request."""

    return FakeChapterService()


@pytest.fixture
def api_client(chapter_service: FakeChapterService) -> ChapterApiClient:
    """Provide an API client wired to the in-memory content service."""

    return ChapterApiClient(
        transport=chapter_service,
        endpoints=ChapterEndpoints(base_url="https://studio.example.com"),
        token_provider=lambda: "secret-token",
    )


@pytest.fixture
def observer() -> RecordingObserver:
    """Provide an observer that records notifications."""

    return RecordingObserver()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    """Provide a sleeper that records delays instead of sleeping."""

    return RecordingSleeper()


@pytest.fixture(autouse=True)
def _isolate_chapterpush_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host `CHAPTERPUSH_*` variables out of every test."""

    for key in ("CHAPTERPUSH_BASE_URL", "CHAPTERPUSH_AUTH_TOKEN", "CHAPTERPUSH_TENANT_HOST"):
        monkeypatch.delenv(key, raising=False)
