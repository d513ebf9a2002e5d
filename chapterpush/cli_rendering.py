"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
batch plans, and submission summaries.
"""

from __future__ import annotations

from typing import NoReturn, Sequence

import typer

from .errors import PublishStageError
from .models.datatypes import (
    Batch,
    SubmissionFailure,
    SubmissionPartialSuccess,
    SubmissionSummary,
)


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PublishStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def _format_number_ranges(numbers: Sequence[int]) -> str:
    """Collapse sorted integers into compact `1-5,9` ranges."""

    ranges: list[str] = []
    start: int | None = None
    previous: int | None = None
    for number in sorted(numbers):
        if start is None:
            start = previous = number
            continue
        if previous is not None and number == previous + 1:
            previous = number
            continue
        ranges.append(f"{start}" if start == previous else f"{start}-{previous}")
        start = previous = number
    if start is not None:
        ranges.append(f"{start}" if start == previous else f"{start}-{previous}")
    return ",".join(ranges)


def echo_batch_plan(decision: str, batches: Sequence[Batch], payload_bytes: int) -> None:
    """Print the batching decision and one row per planned batch."""

    total_images = sum(len(batch.images) for batch in batches)
    typer.echo(f"Images: {total_images} ({payload_bytes} bytes)")
    typer.echo(f"Batching decision: {decision}")
    for batch in batches:
        operation = "create" if batch.index == 0 else "append"
        typer.echo(
            f"{batch.index}. {operation} images "
            f"{batch.first_image_number}-{batch.last_image_number} "
            f"({len(batch.images)} images, {batch.size_bytes} bytes)"
        )


def echo_submission_summary(summary: SubmissionSummary) -> None:
    """Print the caller-facing submission summary."""

    outcome = summary.outcome
    typer.echo(f"Outcome: {outcome.status}")
    typer.echo(f"Strategy: {summary.strategy}")
    typer.echo(f"Images submitted: {summary.total_images}")
    typer.echo(f"Batches attempted: {summary.batches_attempted}/{summary.total_batches}")
    typer.echo(f"Batches failed: {summary.batches_failed}")
    typer.echo(f"Transport retries: {summary.retry_attempts}")
    if isinstance(outcome, SubmissionFailure):
        typer.echo(f"Failure reason: {outcome.reason}")
        if outcome.detail:
            typer.echo(f"Failure detail: {outcome.detail}")
        return

    typer.echo(f"Chapter id: {outcome.chapter_handle}")
    if isinstance(outcome, SubmissionPartialSuccess):
        failed_batches = ",".join(str(index) for index in summary.failed_batch_indices)
        typer.echo(f"Failed batches: {failed_batches}")
        typer.echo(
            f"Missing images: {summary.failed_image_count} "
            f"({_format_number_ranges(summary.failed_image_numbers)})"
        )


class BatchProgressIndicator:
    """Render one progress line per batch attempt and result."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_batch_start(self, index: int, total: int, label: str) -> None:
        """Print one progress line for a batch start."""

        spinner = self._SPINNER_FRAMES[index % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} {spinner} {index + 1}/{total} {label}"
        )

    def on_batch_complete(self, index: int, success: bool) -> None:
        """Print the result of one batch attempt."""

        result = "ok" if success else "failed"
        typer.echo(f"[progress] command={self._command_name} batch={index + 1} result={result}")

    def on_finished(self, outcome: object) -> None:
        _ = outcome
