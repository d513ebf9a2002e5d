"""Sequential create-then-append submission of planned chapter batches.

Responsibilities:
- Create the chapter with batch 0 and obtain its remote handle.
- Append batches 1..N-1 strictly in order, one request at a time.
- Convert append failures into failed-batch bookkeeping instead of aborting.
- Notify the observer and run logger once per batch attempt and once at the end.

Batch 0 is not idempotent on the remote side. The transport never retries a
request that timed out, so a slow create cannot produce a duplicate chapter.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from ..models.datatypes import (
    Batch,
    ChapterMetadata,
    ProgressState,
    SubmissionFailure,
    SubmissionOutcome,
    SubmissionPartialSuccess,
    SubmissionSuccess,
)
from ..telemetry.logger import RunLogger
from ..transport.http_client import TransportError
from .api import ChapterApiClient
from .handles import ChapterHandleError
from .reporting import NullSubmissionObserver, SubmissionObserver


class ChapterSubmitter:
    """Run planned batches against the content service for one comic."""

    def __init__(
        self,
        *,
        api: ChapterApiClient,
        comic_id: str,
        observer: SubmissionObserver | None = None,
        run_logger: RunLogger | None = None,
        inter_batch_delay_seconds: float = 0.5,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize API client, target comic, notification hooks, and pacing."""

        if inter_batch_delay_seconds < 0.0:
            raise ValueError("`inter_batch_delay_seconds` must be non-negative.")
        self._api = api
        self._comic_id = comic_id
        self._observer = observer if observer is not None else NullSubmissionObserver()
        self._run_logger = run_logger
        self._inter_batch_delay_seconds = inter_batch_delay_seconds
        self._sleeper = sleeper

    def submit(
        self,
        metadata: ChapterMetadata,
        batches: Sequence[Batch],
    ) -> SubmissionOutcome:
        """Create the chapter from batch 0, append the rest, and return the outcome."""

        if not batches:
            return self._finish(
                SubmissionFailure(reason="no-images", detail="No images to submit.")
            )

        total_images = sum(len(batch.images) for batch in batches)
        progress = ProgressState(total_batches=len(batches))

        first = batches[0]
        self._start_batch(
            progress,
            first,
            f"Creating chapter {metadata.chapter_number} with images "
            f"{first.first_image_number}-{first.last_image_number} of {total_images}",
        )
        try:
            chapter_handle = self._api.create_chapter(self._comic_id, metadata, first.images)
        except TransportError as exc:
            self._complete_batch(first, success=False, error=exc)
            return self._finish(
                SubmissionFailure(
                    reason=exc.failure_kind,
                    detail=str(exc),
                    status_code=exc.status_code,
                )
            )
        except ChapterHandleError as exc:
            self._complete_batch(first, success=False, error=exc)
            return self._finish(SubmissionFailure(reason="missing-handle", detail=str(exc)))
        self._complete_batch(first, success=True, chapter=chapter_handle)

        failed_indices: set[int] = set()
        for batch in batches[1:]:
            self._sleeper(self._inter_batch_delay_seconds)
            self._start_batch(
                progress,
                batch,
                f"Appending images {batch.first_image_number}-{batch.last_image_number} "
                f"of {total_images}",
            )
            try:
                self._api.append_images(chapter_handle, batch.images)
            except TransportError as exc:
                failed_indices.add(batch.index)
                self._complete_batch(batch, success=False, error=exc)
                continue
            self._complete_batch(batch, success=True)

        if failed_indices:
            return self._finish(
                SubmissionPartialSuccess(
                    chapter_handle=chapter_handle,
                    failed_batch_indices=frozenset(failed_indices),
                )
            )
        return self._finish(SubmissionSuccess(chapter_handle=chapter_handle))

    def _start_batch(self, progress: ProgressState, batch: Batch, label: str) -> None:
        """Advance progress state and emit batch-start notifications."""

        progress.current_batch = batch.index
        progress.label = label
        self._observer.on_batch_start(
            progress.current_batch, progress.total_batches, progress.label
        )
        if self._run_logger is not None:
            self._run_logger.log_stage_start(
                self._stage_name(batch),
                batch=progress.current_batch,
                total=progress.total_batches,
                images=len(batch.images),
            )

    def _complete_batch(
        self,
        batch: Batch,
        *,
        success: bool,
        error: Exception | None = None,
        chapter: str | None = None,
    ) -> None:
        """Emit batch-complete notifications."""

        self._observer.on_batch_complete(batch.index, success)
        if self._run_logger is None:
            return
        stage = self._stage_name(batch)
        if success:
            context: dict[str, object] = {"batch": batch.index}
            if chapter is not None:
                context["chapter"] = chapter
            self._run_logger.log_stage_complete(stage, **context)
            return
        kind = getattr(error, "failure_kind", None) or type(error).__name__
        self._run_logger.log_stage_failure(stage, str(kind), batch=batch.index)

    def _finish(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        """Emit the terminal notification and return the outcome."""

        self._observer.on_finished(outcome)
        if self._run_logger is not None:
            context: dict[str, object] = {}
            if isinstance(outcome, SubmissionPartialSuccess):
                context["failed_batches"] = ":".join(
                    str(index) for index in sorted(outcome.failed_batch_indices)
                )
            if isinstance(outcome, SubmissionFailure):
                context["reason"] = outcome.reason
            self._run_logger.log_outcome(outcome.status, **context)
        return outcome

    @staticmethod
    def _stage_name(batch: Batch) -> str:
        return "create" if batch.index == 0 else "append"
