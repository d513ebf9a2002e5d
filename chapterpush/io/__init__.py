"""Input helpers that turn CLI arguments into image payloads."""

from .image_sources import expand_image_sources, load_image_payload, load_image_payloads

__all__ = ["expand_image_sources", "load_image_payload", "load_image_payloads"]
