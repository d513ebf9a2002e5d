"""Top-level package for chapterpush.

This package publishes multi-image chapters to a content service, splitting
large chapters into a create request followed by ordered append requests. The
main library entry point is `ChapterPublisher`.
"""

from .upload.publisher import ChapterPublisher

__all__ = ["ChapterPublisher", "__version__"]

__version__ = "0.1.0"
