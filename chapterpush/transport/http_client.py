"""HTTP transport primitive for chapter publishing requests.

Responsibilities:
- Execute one HTTP exchange with a hard per-attempt timeout.
- Retry connection-class failures other than TLS errors with bounded exponential backoff.
- Classify every failure as `timeout`, `network`, or `server` without retrying
  timeouts or server responses.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import re
import time
from typing import Any, Callable

import requests

from ..models.datatypes import HttpRequest, HttpResponse


class TransportError(RuntimeError):
    """Raised when an HTTP exchange fails or returns an unusable response."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "network",
        status_code: int | None = None,
        body: str = "",
        attempts: int = 1,
    ) -> None:
        """Initialize transport error metadata for orchestrator bookkeeping."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.body = body
        self.attempts = attempts


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded exponential backoff for connection-class failures.

    Attributes:
        max_attempts: Total attempts per request, including the first one.
        backoff_base_seconds: Delay before the first retry; doubles per retry.
        backoff_max_seconds: Upper bound for any single delay.
    """

    max_attempts: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 8.0

    def __post_init__(self) -> None:
        """Validate retry bounds."""

        if self.max_attempts < 1:
            raise ValueError("`max_attempts` must be at least 1.")
        if self.backoff_base_seconds < 0.0 or self.backoff_max_seconds < 0.0:
            raise ValueError("Retry backoff delays must be non-negative.")

    def delay_for_retry(self, retry_index: int) -> float:
        """Return the sleep duration before the given 0-based retry."""

        return min(self.backoff_base_seconds * (2**retry_index), self.backoff_max_seconds)


class HttpTransport:
    """Minimal requests-based transport with timeout and retry classification."""

    _MAX_BODY_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        retry_policy: RetryPolicy | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize transport session, retry policy, and sleep hook."""

        self._session = session if session is not None else requests.Session()
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy()
        self._sleeper = sleeper if sleeper is not None else time.sleep
        self.retry_attempt_count = 0

    def send(self, request: HttpRequest) -> HttpResponse:
        """Execute one request and return its parsed JSON object response."""

        policy = self.retry_policy
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._session.request(
                    request.method,
                    request.url,
                    json=request.json_body,
                    files=request.files,
                    headers=request.headers,
                    timeout=request.timeout_seconds,
                )
            except requests.Timeout as exc:
                raise TransportError(
                    f"{request.method} {request.url} timed out after "
                    f"{request.timeout_seconds:g}s.",
                    failure_kind="timeout",
                    attempts=attempt,
                ) from exc
            except requests.exceptions.SSLError as exc:
                raise TransportError(
                    f"{request.method} {request.url} TLS error: "
                    f"{self._short_message(str(exc))}",
                    failure_kind="network",
                    attempts=attempt,
                ) from exc
            except requests.ConnectionError as exc:
                if attempt >= policy.max_attempts:
                    raise TransportError(
                        f"{request.method} {request.url} failed after {attempt} attempt(s): "
                        f"{self._short_message(str(exc))}",
                        failure_kind="network",
                        attempts=attempt,
                    ) from exc
                self.retry_attempt_count += 1
                self._sleeper(policy.delay_for_retry(attempt - 1))
                continue
            except requests.RequestException as exc:
                raise TransportError(
                    f"{request.method} {request.url} transport error: "
                    f"{self._short_message(str(exc))}",
                    failure_kind="network",
                    attempts=attempt,
                ) from exc

            return self._parse_response(request, response, attempt)

    def _parse_response(
        self,
        request: HttpRequest,
        response: requests.Response,
        attempt: int,
    ) -> HttpResponse:
        """Validate status/content type and decode the JSON object body."""

        status_code = int(response.status_code)
        raw_text = response.text or ""
        if not 200 <= status_code < 300:
            raise TransportError(
                self._server_error_message(request, status_code, raw_text),
                failure_kind="server",
                status_code=status_code,
                body=raw_text,
                attempts=attempt,
            )

        content_type = response.headers.get("Content-Type", "")
        if "json" not in content_type.lower():
            raise TransportError(
                f"{request.method} {request.url} returned non-JSON content "
                f"type `{content_type or 'none'}` (HTTP {status_code}).",
                failure_kind="server",
                status_code=status_code,
                body=raw_text,
                attempts=attempt,
            )

        try:
            payload: Any = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise TransportError(
                f"{request.method} {request.url} returned invalid JSON (HTTP {status_code}).",
                failure_kind="server",
                status_code=status_code,
                body=raw_text,
                attempts=attempt,
            ) from exc
        if not isinstance(payload, dict):
            raise TransportError(
                f"{request.method} {request.url} returned a JSON "
                f"{type(payload).__name__} instead of an object.",
                failure_kind="server",
                status_code=status_code,
                body=raw_text,
                attempts=attempt,
            )
        return HttpResponse(status_code=status_code, payload=payload, raw_text=raw_text)

    @classmethod
    def _server_error_message(cls, request: HttpRequest, status_code: int, body: str) -> str:
        """Build a concise server-error message from the response body."""

        provider_message = extract_error_message(body)
        headline = f"{request.method} {request.url} failed (HTTP {status_code})"
        if provider_message:
            return f"{headline}: {cls._short_message(provider_message)}"
        return f"{headline}."

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize, redact, and cap diagnostic message length."""

        return short_message(text, cls._MAX_BODY_MESSAGE_CHARS)


def short_message(text: str, limit: int = 180) -> str:
    """Collapse whitespace, redact tokens, and cap message length."""

    compact = " ".join(redact_sensitive_tokens(text).split())
    if len(compact) <= limit:
        return compact
    return f"{compact[: limit - 1]}..."


def redact_sensitive_tokens(text: str) -> str:
    """Redact bearer tokens from diagnostic content."""

    return re.sub(
        r"(?i)bearer\s+[A-Za-z0-9._~+/=-]{8,}",
        "Bearer [redacted-token]",
        text,
    )


def extract_error_message(body: str) -> str:
    """Return the `message` or `error` text of a JSON error body, else the raw body."""

    if not body:
        return ""
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return body.strip()

    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict):
                nested = value.get("message")
                if isinstance(nested, str) and nested.strip():
                    return nested.strip()
    return body.strip()
