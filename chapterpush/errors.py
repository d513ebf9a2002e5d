"""Domain exceptions for publishing and CLI diagnostics."""

from __future__ import annotations


class PublishStageError(RuntimeError):
    """Raised when a specific publishing stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped publishing error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
