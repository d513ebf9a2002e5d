"""Telemetry and observability helpers.

This package emits deterministic run events for publishing auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
