"""Publishing facade combining batching policy, planning, and submission.

Responsibilities:
- Reject empty image input before planning.
- Choose between one direct create request and a batched submission.
- Summarize the terminal outcome for CLI and library callers.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from ..models.datatypes import (
    Batch,
    ChapterMetadata,
    ImagePayload,
    SubmissionFailure,
    SubmissionOutcome,
    SubmissionPartialSuccess,
    SubmissionSummary,
)
from ..telemetry.logger import RunLogger
from .api import ChapterApiClient
from .planner import (
    BatchingDecision,
    BatchingPolicy,
    decide_batching,
    measure_payload_bytes,
    plan,
    single_batch,
)
from .reporting import SubmissionObserver
from .submitter import ChapterSubmitter

BatchingConfirmation = Callable[[int, int], bool]


class ChapterPublisher:
    """Publish one chapter's images through direct or batched submission."""

    def __init__(
        self,
        *,
        api: ChapterApiClient,
        policy: BatchingPolicy | None = None,
        observer: SubmissionObserver | None = None,
        run_logger: RunLogger | None = None,
        inter_batch_delay_seconds: float = 0.5,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize API client, batching policy, and notification hooks."""

        self.api = api
        self.policy = policy if policy is not None else BatchingPolicy()
        self._observer = observer
        self._run_logger = run_logger
        self._inter_batch_delay_seconds = inter_batch_delay_seconds
        self._sleeper = sleeper

    def resolve_strategy(
        self,
        images: Sequence[ImagePayload],
        *,
        force_batching: bool | None = None,
        confirm_batching: BatchingConfirmation | None = None,
    ) -> bool:
        """Return whether the images should be submitted in batches.

        Below the ask thresholds the answer is always no and above the force
        thresholds always yes. In between, an explicit `force_batching` flag
        wins, then `confirm_batching(image_count, payload_bytes)`, and without
        either the images are batched.
        """

        decision = decide_batching(images, self.policy)
        if decision is BatchingDecision.DIRECT:
            return False
        if decision is BatchingDecision.FORCE:
            return True
        if force_batching is not None:
            return force_batching
        if confirm_batching is not None:
            return bool(confirm_batching(len(images), measure_payload_bytes(images)))
        return True

    def publish(
        self,
        comic_id: str,
        metadata: ChapterMetadata,
        images: Sequence[ImagePayload],
        *,
        force_batching: bool | None = None,
        confirm_batching: BatchingConfirmation | None = None,
    ) -> SubmissionSummary:
        """Submit a chapter and return the caller-facing summary."""

        submitter = ChapterSubmitter(
            api=self.api,
            comic_id=comic_id,
            observer=self._observer,
            run_logger=self._run_logger,
            inter_batch_delay_seconds=self._inter_batch_delay_seconds,
            sleeper=self._sleeper,
        )
        if not images:
            outcome = submitter.submit(metadata, [])
            return self._summarize([], outcome, strategy="none", retry_attempts=0)

        batched = self.resolve_strategy(
            images,
            force_batching=force_batching,
            confirm_batching=confirm_batching,
        )
        batches = plan(images, self.policy.batch_size) if batched else single_batch(images)
        retries_before = self._transport_retry_count()
        outcome = submitter.submit(metadata, batches)
        return self._summarize(
            batches,
            outcome,
            strategy="batched" if batched else "direct",
            retry_attempts=self._transport_retry_count() - retries_before,
        )

    def _transport_retry_count(self) -> int:
        """Return the transport's cumulative retry counter, when it keeps one."""

        return int(getattr(self.api.transport, "retry_attempt_count", 0))

    @staticmethod
    def _summarize(
        batches: Sequence[Batch],
        outcome: SubmissionOutcome,
        *,
        strategy: str,
        retry_attempts: int,
    ) -> SubmissionSummary:
        """Build the summary for a finished submission."""

        total_images = sum(len(batch.images) for batch in batches)
        if isinstance(outcome, SubmissionFailure):
            attempted = 1 if batches else 0
            return SubmissionSummary(
                total_images=total_images,
                total_batches=len(batches),
                batches_attempted=attempted,
                failed_batch_indices=(0,) if batches else (),
                failed_image_count=total_images,
                strategy=strategy,
                outcome=outcome,
                retry_attempts=retry_attempts,
            )

        failed_indices: tuple[int, ...] = ()
        if isinstance(outcome, SubmissionPartialSuccess):
            failed_indices = tuple(sorted(outcome.failed_batch_indices))
        failed_batches = [batch for batch in batches if batch.index in failed_indices]
        failed_numbers = tuple(
            number
            for batch in failed_batches
            for number in range(batch.first_image_number, batch.last_image_number + 1)
        )
        return SubmissionSummary(
            total_images=total_images,
            total_batches=len(batches),
            batches_attempted=len(batches),
            failed_batch_indices=failed_indices,
            failed_image_count=len(failed_numbers),
            strategy=strategy,
            outcome=outcome,
            retry_attempts=retry_attempts,
            failed_image_numbers=failed_numbers,
        )
