"""Core datatypes shared across chapterpush modules.

Responsibilities:
- Represent immutable records exchanged between planner, orchestrator, and CLI.
- Represent the terminal submission outcome as an explicit tagged union.

Key types:
- `ImagePayload`, `ChapterMetadata`, `Batch`, `ProgressState`,
  `SubmissionSuccess`, `SubmissionPartialSuccess`, `SubmissionFailure`,
  `SubmissionSummary`, `HttpRequest`, and `HttpResponse`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Union

from ..parsing import normalize_optional_string, parse_chapter_number


@dataclass(frozen=True, slots=True)
class ImagePayload:
    """One page image as submitted to the remote service.

    Attributes:
        value: Image URL or base64 data URI string.
        source: Optional label describing where the payload came from (path or URL).
    """

    value: str
    source: str | None = None

    def __post_init__(self) -> None:
        """Reject blank payload values."""

        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Image payload must be a non-empty string.")

    @property
    def size_bytes(self) -> int:
        """Return the serialized UTF-8 size of the payload value."""

        return len(self.value.encode("utf-8"))


@dataclass(frozen=True, slots=True)
class ChapterMetadata:
    """Chapter fields sent once with the creating batch.

    Attributes:
        chapter_number: Positive chapter number with at most two decimal places.
        title: Non-empty chapter title.
        description: Optional chapter description.
    """

    chapter_number: Decimal
    title: str
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalize chapter fields."""

        object.__setattr__(self, "chapter_number", parse_chapter_number(self.chapter_number))
        title = normalize_optional_string(self.title)
        if title is None:
            raise ValueError("Chapter title must be a non-empty string.")
        object.__setattr__(self, "title", title)
        object.__setattr__(self, "description", normalize_optional_string(self.description))

    def as_request_fields(self) -> dict[str, Any]:
        """Return the JSON fields describing this chapter for the create request."""

        number = self.chapter_number
        chapter_number: int | float
        if number == number.to_integral_value():
            chapter_number = int(number)
        else:
            chapter_number = float(number)
        fields: dict[str, Any] = {"chapterNumber": chapter_number, "title": self.title}
        if self.description is not None:
            fields["description"] = self.description
        return fields


@dataclass(frozen=True, slots=True)
class Batch:
    """An ordered group of consecutive images.

    Attributes:
        index: 0-based batch index.
        images: Images in original order.
        first_image_number: 1-based position of the first image in the full sequence.
    """

    index: int
    images: tuple[ImagePayload, ...]
    first_image_number: int = 1

    @property
    def last_image_number(self) -> int:
        """Return the 1-based position of the last image in the full sequence."""

        return self.first_image_number + len(self.images) - 1

    @property
    def size_bytes(self) -> int:
        """Return the serialized size of all images in this batch."""

        return sum(image.size_bytes for image in self.images)


@dataclass(slots=True)
class ProgressState:
    """Mutable per-submission progress, updated once per batch attempt."""

    current_batch: int = 0
    total_batches: int = 0
    label: str = ""


@dataclass(frozen=True, slots=True)
class SubmissionSuccess:
    """Chapter created and every append batch applied."""

    status: ClassVar[str] = "success"

    chapter_handle: str


@dataclass(frozen=True, slots=True)
class SubmissionPartialSuccess:
    """Chapter created, but one or more append batches failed."""

    status: ClassVar[str] = "partial"

    chapter_handle: str
    failed_batch_indices: frozenset[int]


@dataclass(frozen=True, slots=True)
class SubmissionFailure:
    """Nothing was created.

    Attributes:
        reason: One of `no-images`, `timeout`, `network`, `server`, `missing-handle`.
        detail: Human-readable diagnostic detail.
        status_code: HTTP status of the failed create call, when one was received.
    """

    status: ClassVar[str] = "failure"

    reason: str
    detail: str = ""
    status_code: int | None = None


SubmissionOutcome = Union[SubmissionSuccess, SubmissionPartialSuccess, SubmissionFailure]


@dataclass(frozen=True, slots=True)
class SubmissionSummary:
    """Caller-facing report for one publish call."""

    total_images: int
    total_batches: int
    batches_attempted: int
    failed_batch_indices: tuple[int, ...]
    failed_image_count: int
    strategy: str
    outcome: SubmissionOutcome
    retry_attempts: int = 0
    failed_image_numbers: tuple[int, ...] = field(default_factory=tuple)

    @property
    def batches_failed(self) -> int:
        """Return how many batches did not reach the remote chapter."""

        return len(self.failed_batch_indices)


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """One HTTP exchange description for the transport primitive."""

    method: str
    url: str
    timeout_seconds: float
    json_body: dict[str, Any] | None = None
    files: dict[str, tuple[str, bytes, str]] | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Parsed structured response of a successful HTTP exchange."""

    status_code: int
    payload: dict[str, Any]
    raw_text: str = ""
