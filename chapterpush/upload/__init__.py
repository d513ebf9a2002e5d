"""Chapter upload core: planning, submission, reporting, and the publishing facade."""

from .api import ChapterApiClient, ChapterEndpoints
from .handles import ChapterHandleError, extract_chapter_handle
from .planner import BatchingDecision, BatchingPolicy, decide_batching, plan
from .publisher import ChapterPublisher
from .reporting import NullSubmissionObserver, SubmissionObserver
from .submitter import ChapterSubmitter

__all__ = [
    "BatchingDecision",
    "BatchingPolicy",
    "ChapterApiClient",
    "ChapterEndpoints",
    "ChapterHandleError",
    "ChapterPublisher",
    "ChapterSubmitter",
    "NullSubmissionObserver",
    "SubmissionObserver",
    "decide_batching",
    "extract_chapter_handle",
    "plan",
]
