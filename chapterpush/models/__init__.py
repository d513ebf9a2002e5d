"""Shared typed data models for chapterpush.

This package contains dataclasses used across upload modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    Batch,
    ChapterMetadata,
    HttpRequest,
    HttpResponse,
    ImagePayload,
    ProgressState,
    SubmissionFailure,
    SubmissionOutcome,
    SubmissionPartialSuccess,
    SubmissionSuccess,
    SubmissionSummary,
)

__all__ = [
    "Batch",
    "ChapterMetadata",
    "HttpRequest",
    "HttpResponse",
    "ImagePayload",
    "ProgressState",
    "SubmissionFailure",
    "SubmissionOutcome",
    "SubmissionPartialSuccess",
    "SubmissionSuccess",
    "SubmissionSummary",
]
