"""Unit tests for content-service request building and response checks."""

from __future__ import annotations

from decimal import Decimal

import pytest

from chapterpush.models.datatypes import ChapterMetadata, ImagePayload
from chapterpush.transport.http_client import TransportError
from chapterpush.upload.api import ChapterApiClient, ChapterEndpoints
from tests.fakes import FakeChapterService, make_images


def test_endpoints_build_create_append_and_upload_urls() -> None:
    """Endpoint layout should join the base URL and path templates."""

    endpoints = ChapterEndpoints(base_url="https://studio.example.com/")

    assert endpoints.create_url("c1") == "https://studio.example.com/api2/comics/c1/chapters"
    assert endpoints.append_url("ch-1") == "https://studio.example.com/api2/chapters/ch-1"
    assert endpoints.upload_url() == "https://studio.example.com/api2/upload/single"


def test_create_chapter_posts_metadata_images_and_headers() -> None:
    """The create request should carry chapter fields, images, and auth headers."""

    service = FakeChapterService()
    client = ChapterApiClient(
        transport=service,
        endpoints=ChapterEndpoints(base_url="https://studio.example.com"),
        token_provider=lambda: " secret-token ",
        tenant_host="tenant.example.com",
    )
    metadata = ChapterMetadata(chapter_number=Decimal("12.5"), title="Arrival")
    images = make_images(2)

    handle = client.create_chapter("c1", metadata, images)

    assert handle == "chapter-1"
    request = service.creates[0]
    assert request.method == "POST"
    assert request.timeout_seconds == 120.0
    assert request.json_body == {
        "chapterNumber": 12.5,
        "title": "Arrival",
        "images": [image.value for image in images],
    }
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["X-Original-Host"] == "tenant.example.com"
    assert request.headers["Accept"] == "application/json"


def test_headers_omit_authorization_without_token() -> None:
    """No bearer header should be sent when no token resolves."""

    service = FakeChapterService()
    client = ChapterApiClient(
        transport=service,
        endpoints=ChapterEndpoints(base_url="https://studio.example.com"),
    )

    client.append_images("ch-1", make_images(1))

    assert "Authorization" not in service.appends[0].headers
    assert "X-Original-Host" not in service.appends[0].headers


def test_append_images_patches_with_append_flag(
    api_client: ChapterApiClient,
    chapter_service: FakeChapterService,
) -> None:
    """Append requests should PATCH the chapter URL with `append: true`."""

    images = make_images(3)

    api_client.append_images("ch-9", images)

    request = chapter_service.appends[0]
    assert request.url == "https://studio.example.com/api2/chapters/ch-9"
    assert request.timeout_seconds == 60.0
    assert request.json_body == {"images": [image.value for image in images], "append": True}


def test_success_false_body_is_rejected_as_server_error() -> None:
    """A 2xx body with `success: false` should raise a server transport error."""

    service = FakeChapterService(create_payload={"success": False, "message": "duplicate"})
    client = ChapterApiClient(
        transport=service,
        endpoints=ChapterEndpoints(base_url="https://studio.example.com"),
    )
    metadata = ChapterMetadata(chapter_number=Decimal(3), title="Three")

    with pytest.raises(TransportError) as exc_info:
        client.create_chapter("c1", metadata, make_images(1))

    assert exc_info.value.failure_kind == "server"
    assert "duplicate" in str(exc_info.value)


def test_upload_image_returns_hosted_url(
    api_client: ChapterApiClient,
    chapter_service: FakeChapterService,
) -> None:
    """Single-image uploads should send multipart `image` and return the file URL."""

    url = api_client.upload_image("page-1.png", b"\x89PNG", "image/png")

    assert url == "https://cdn.example.com/uploaded.png"
    request = chapter_service.requests[0]
    assert request.url == "https://studio.example.com/api2/upload/single"
    assert request.files == {"image": ("page-1.png", b"\x89PNG", "image/png")}
    assert request.json_body is None


def test_upload_image_without_url_raises_server_error() -> None:
    """An upload response lacking `file.url` should be a server error."""

    class _NoUrlService(FakeChapterService):
        def send(self, request):  # type: ignore[no-untyped-def]
            response = super().send(request)
            response.payload["file"] = {}
            return response

    client = ChapterApiClient(
        transport=_NoUrlService(),
        endpoints=ChapterEndpoints(base_url="https://studio.example.com"),
    )

    with pytest.raises(TransportError, match="no file URL"):
        client.upload_image("page-1.png", b"data", "image/png")


def test_integral_chapter_numbers_are_sent_as_integers() -> None:
    """Whole chapter numbers should serialize without a fractional part."""

    fields = ChapterMetadata(chapter_number=Decimal("7.00"), title=" Seven ").as_request_fields()

    assert fields == {"chapterNumber": 7, "title": "Seven"}
    assert isinstance(fields["chapterNumber"], int)
    assert ImagePayload(value="https://cdn.example.com/a.png").size_bytes == 29
