"""HTTP transport layer with timeout and retry classification."""

from .http_client import HttpTransport, RetryPolicy, TransportError

__all__ = ["HttpTransport", "RetryPolicy", "TransportError"]
