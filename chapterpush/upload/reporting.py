"""Progress and result notification surface for chapter submissions."""

from __future__ import annotations

from typing import Protocol

from ..models.datatypes import SubmissionOutcome


class SubmissionObserver(Protocol):
    """Receives push notifications from the submission orchestrator.

    Calls arrive from the single thread running `submit`, in batch order.
    """

    def on_batch_start(self, index: int, total: int, label: str) -> None:
        """Called once before each batch attempt (not per transport retry)."""

    def on_batch_complete(self, index: int, success: bool) -> None:
        """Called once after each batch attempt concludes."""

    def on_finished(self, outcome: SubmissionOutcome) -> None:
        """Called exactly once with the terminal outcome."""


class NullSubmissionObserver:
    """Observer that ignores every notification."""

    def on_batch_start(self, index: int, total: int, label: str) -> None:
        _ = (index, total, label)

    def on_batch_complete(self, index: int, success: bool) -> None:
        _ = (index, success)

    def on_finished(self, outcome: SubmissionOutcome) -> None:
        _ = outcome
