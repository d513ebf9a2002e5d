"""Content-service endpoints used while publishing a chapter.

Responsibilities:
- Build create, append, and single-image upload requests.
- Attach the bearer token and tenant host headers from injected providers.
- Reject `success: false` bodies and extract the created chapter handle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from ..models.datatypes import ChapterMetadata, HttpRequest, HttpResponse, ImagePayload
from ..parsing import normalize_optional_string
from ..transport.http_client import TransportError, extract_error_message, short_message
from .handles import extract_chapter_handle


class Transport(Protocol):
    """Protocol for the transport primitive used by the API client."""

    def send(self, request: HttpRequest) -> HttpResponse:
        """Execute one HTTP exchange."""


@dataclass(frozen=True, slots=True)
class ChapterEndpoints:
    """Endpoint layout of the content service.

    Attributes:
        base_url: Service origin, for example `https://studio.example.com`.
        create_chapter_path: Path template with a `{comic_id}` placeholder.
        append_chapter_path: Path prefix; the chapter handle is appended as last segment.
        upload_path: Single-image multipart upload path.
    """

    base_url: str
    create_chapter_path: str = "/api2/comics/{comic_id}/chapters"
    append_chapter_path: str = "/api2/chapters"
    upload_path: str = "/api2/upload/single"

    def create_url(self, comic_id: str) -> str:
        """Return the create-chapter URL for a comic."""

        path = self.create_chapter_path.format(comic_id=comic_id)
        return f"{self.base_url.rstrip('/')}{path}"

    def append_url(self, chapter_handle: str) -> str:
        """Return the append URL for a created chapter."""

        prefix = self.append_chapter_path.rstrip("/")
        return f"{self.base_url.rstrip('/')}{prefix}/{chapter_handle}"

    def upload_url(self) -> str:
        """Return the single-image upload URL."""

        return f"{self.base_url.rstrip('/')}{self.upload_path}"


def _no_token() -> str | None:
    return None


class ChapterApiClient:
    """Issue chapter create/append calls through an injected transport."""

    def __init__(
        self,
        *,
        transport: Transport,
        endpoints: ChapterEndpoints,
        create_timeout_seconds: float = 120.0,
        append_timeout_seconds: float = 60.0,
        token_provider: Callable[[], str | None] = _no_token,
        tenant_host: str | None = None,
    ) -> None:
        """Initialize endpoint layout, timeouts, and header providers."""

        self.transport = transport
        self.endpoints = endpoints
        self.create_timeout_seconds = create_timeout_seconds
        self.append_timeout_seconds = append_timeout_seconds
        self._token_provider = token_provider
        self._tenant_host = normalize_optional_string(tenant_host)

    def _headers(self) -> dict[str, str]:
        """Build auth and tenant headers for one request."""

        headers: dict[str, str] = {"Accept": "application/json"}
        token = normalize_optional_string(self._token_provider())
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        if self._tenant_host is not None:
            headers["X-Original-Host"] = self._tenant_host
        return headers

    def create_chapter(
        self,
        comic_id: str,
        metadata: ChapterMetadata,
        images: Sequence[ImagePayload],
    ) -> str:
        """Create a chapter with its first images and return the chapter handle.

        Raises:
            TransportError: On timeout, network, or server failures.
            ChapterHandleError: If the response carries no usable handle.
        """

        body: dict[str, Any] = dict(metadata.as_request_fields())
        body["images"] = [image.value for image in images]
        request = HttpRequest(
            method="POST",
            url=self.endpoints.create_url(comic_id),
            timeout_seconds=self.create_timeout_seconds,
            json_body=body,
            headers=self._headers(),
        )
        response = self.transport.send(request)
        self._require_success(request, response)
        return extract_chapter_handle(response.payload)

    def append_images(self, chapter_handle: str, images: Sequence[ImagePayload]) -> None:
        """Append images to an existing chapter.

        Raises:
            TransportError: On timeout, network, or server failures.
        """

        request = HttpRequest(
            method="PATCH",
            url=self.endpoints.append_url(chapter_handle),
            timeout_seconds=self.append_timeout_seconds,
            json_body={"images": [image.value for image in images], "append": True},
            headers=self._headers(),
        )
        response = self.transport.send(request)
        self._require_success(request, response)

    def upload_image(self, filename: str, content: bytes, mime_type: str) -> str:
        """Upload one image file and return its hosted URL."""

        request = HttpRequest(
            method="POST",
            url=self.endpoints.upload_url(),
            timeout_seconds=self.create_timeout_seconds,
            files={"image": (filename, content, mime_type)},
            headers=self._headers(),
        )
        response = self.transport.send(request)
        self._require_success(request, response)
        file_payload = response.payload.get("file")
        url = file_payload.get("url") if isinstance(file_payload, dict) else None
        normalized_url = normalize_optional_string(url) if isinstance(url, str) else None
        if normalized_url is None:
            raise TransportError(
                f"Upload of `{filename}` returned no file URL.",
                failure_kind="server",
                status_code=response.status_code,
                body=response.raw_text,
            )
        return normalized_url

    @staticmethod
    def _require_success(request: HttpRequest, response: HttpResponse) -> None:
        """Treat an explicit `success: false` body as a server failure."""

        if response.payload.get("success") is False:
            message = short_message(extract_error_message(response.raw_text))
            if not message:
                message = "request rejected"
            raise TransportError(
                f"{request.method} {request.url} was rejected "
                f"(HTTP {response.status_code}): {message}",
                failure_kind="server",
                status_code=response.status_code,
                body=response.raw_text,
            )
