"""Resolve CLI image arguments into ordered image payloads.

Responsibilities:
- Accept remote URLs and base64 data URIs as-is.
- Expand directories into their image files in natural page order.
- Inline local files as base64 data URIs, or hand them to an uploader that
  returns a hosted URL.
"""

from __future__ import annotations

import base64
import mimetypes
import os
from pathlib import Path
import re
from typing import Callable, Iterable

from ..models.datatypes import ImagePayload


_IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".bmp"})
_BASE64_BODY = re.compile(r"^[A-Za-z0-9+/=]+$")
_DIGIT_RUN = re.compile(r"(\d+)")

ImageUploader = Callable[[str, bytes, str], str]


def is_remote_url(value: str) -> bool:
    """Return whether a value is an `http(s)` URL."""

    lowered = value.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def is_base64_image(value: str) -> bool:
    """Return whether a value is a data URI or a bare base64 image body."""

    stripped = value.strip()
    if stripped.startswith("data:image/"):
        return True
    return len(stripped) > 100 and _BASE64_BODY.match(stripped) is not None


def is_inline_source(source: str) -> bool:
    """Return whether a CLI argument is sent as-is instead of read from disk.

    Existing paths always win over the bare-base64 check, so long alphanumeric
    paths are never mistaken for image bodies.
    """

    if is_remote_url(source) or source.strip().startswith("data:image/"):
        return True
    if os.path.exists(source):
        return False
    return is_base64_image(source)


def _natural_key(path: Path) -> list[object]:
    """Sort key placing `page2` before `page10`."""

    return [
        int(part) if part.isdigit() else part.lower()
        for part in _DIGIT_RUN.split(path.name)
    ]


def expand_image_sources(sources: Iterable[str]) -> list[str]:
    """Expand directory arguments into image file paths, keeping argument order."""

    expanded: list[str] = []
    for source in sources:
        if is_inline_source(source):
            expanded.append(source)
            continue
        path = Path(source)
        if path.is_dir():
            files = sorted(
                (
                    child
                    for child in path.iterdir()
                    if child.is_file() and child.suffix.lower() in _IMAGE_SUFFIXES
                ),
                key=_natural_key,
            )
            if not files:
                raise ValueError(f"Directory `{path}` contains no image files.")
            expanded.extend(str(child) for child in files)
            continue
        expanded.append(source)
    return expanded


def _image_mime_type(path: Path) -> str:
    """Return the image MIME type for a file path or raise for non-images."""

    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None and path.suffix.lower() == ".webp":
        mime_type = "image/webp"
    if mime_type is None or not mime_type.startswith("image/"):
        raise ValueError(f"File `{path}` is not a recognized image type.")
    return mime_type


def encode_data_uri(content: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a base64 data URI."""

    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def load_image_payload(source: str, uploader: ImageUploader | None = None) -> ImagePayload:
    """Resolve one image argument into a payload.

    Raises:
        FileNotFoundError: If a local path does not exist.
        ValueError: If a local file is empty or not an image.
    """

    if is_inline_source(source):
        return ImagePayload(value=source.strip(), source=None)

    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: `{source}`.")
    mime_type = _image_mime_type(path)
    content = path.read_bytes()
    if not content:
        raise ValueError(f"Image file `{path}` is empty.")

    if uploader is not None:
        return ImagePayload(value=uploader(path.name, content, mime_type), source=str(path))
    return ImagePayload(value=encode_data_uri(content, mime_type), source=str(path))


def load_image_payloads(
    sources: Iterable[str],
    uploader: ImageUploader | None = None,
) -> list[ImagePayload]:
    """Resolve image arguments, expanding directories, into ordered payloads."""

    return [load_image_payload(source, uploader) for source in expand_image_sources(sources)]
