"""Batch planning for chapter image submissions.

Responsibilities:
- Partition an ordered image sequence into consecutive fixed-size batches.
- Decide whether a submission needs batching from count and size thresholds.

This module performs no network calls and keeps no state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..models.datatypes import Batch, ImagePayload


_MEBIBYTE = 1024 * 1024


class BatchingDecision(str, Enum):
    """Outcome of the threshold check for one image sequence."""

    DIRECT = "direct"
    ASK = "ask"
    FORCE = "force"


@dataclass(frozen=True, slots=True)
class BatchingPolicy:
    """Thresholds and batch size deciding how a chapter is submitted.

    Attributes:
        batch_size: Maximum images per request once batching is chosen.
        ask_image_count: Image count at which batching becomes worth asking about.
        ask_payload_bytes: Serialized size at which batching becomes worth asking about.
        force_image_count: Image count at which batching is mandatory.
        force_payload_bytes: Serialized size at which batching is mandatory.
    """

    batch_size: int = 5
    ask_image_count: int = 10
    ask_payload_bytes: int = 2 * _MEBIBYTE
    force_image_count: int = 20
    force_payload_bytes: int = 5 * _MEBIBYTE

    def __post_init__(self) -> None:
        """Validate that thresholds are positive and ordered."""

        for name in (
            "batch_size",
            "ask_image_count",
            "ask_payload_bytes",
            "force_image_count",
            "force_payload_bytes",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"`{name}` must be a positive integer.")
        if self.force_image_count < self.ask_image_count:
            raise ValueError("`force_image_count` must not be lower than `ask_image_count`.")
        if self.force_payload_bytes < self.ask_payload_bytes:
            raise ValueError("`force_payload_bytes` must not be lower than `ask_payload_bytes`.")


def measure_payload_bytes(images: Sequence[ImagePayload]) -> int:
    """Return the total serialized size of an image sequence."""

    return sum(image.size_bytes for image in images)


def decide_batching(images: Sequence[ImagePayload], policy: BatchingPolicy) -> BatchingDecision:
    """Classify an image sequence as direct, ask, or forced batching."""

    image_count = len(images)
    payload_bytes = measure_payload_bytes(images)
    if image_count >= policy.force_image_count or payload_bytes >= policy.force_payload_bytes:
        return BatchingDecision.FORCE
    if image_count < policy.ask_image_count and payload_bytes < policy.ask_payload_bytes:
        return BatchingDecision.DIRECT
    return BatchingDecision.ASK


def plan(images: Sequence[ImagePayload], batch_size: int) -> list[Batch]:
    """Split images into consecutive batches of at most `batch_size`, preserving order.

    Raises:
        ValueError: If `images` is empty or `batch_size` is not positive.
    """

    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size <= 0:
        raise ValueError("`batch_size` must be a positive integer.")
    if not images:
        raise ValueError("At least one image is required to plan batches.")

    ordered = tuple(images)
    return [
        Batch(
            index=batch_index,
            images=ordered[start : start + batch_size],
            first_image_number=start + 1,
        )
        for batch_index, start in enumerate(range(0, len(ordered), batch_size))
    ]


def single_batch(images: Sequence[ImagePayload]) -> list[Batch]:
    """Return the whole sequence as one batch for direct submissions."""

    if not images:
        raise ValueError("At least one image is required to plan batches.")
    return [Batch(index=0, images=tuple(images), first_image_number=1)]
