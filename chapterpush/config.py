"""Configuration model and loaders for chapterpush.

Responsibilities:
- Define publishing configuration as a typed dataclass.
- Provide deterministic precedence resolution for the runtime auth token.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `PublisherConfig`: normalized settings for one publish run.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `PublisherConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_non_negative_float,
    parse_positive_int,
)
from .transport.http_client import RetryPolicy
from .upload.api import ChapterEndpoints
from .upload.planner import BatchingPolicy


_MEBIBYTE = 1024 * 1024
_AUTH_TOKEN_ENV_KEY = "CHAPTERPUSH_AUTH_TOKEN"


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class PublisherConfig:
    """Settings for publishing chapters to one content service.

    Attributes:
        base_url: Content service origin (for example `https://studio.example.com`).
        create_chapter_path: Create endpoint path template with `{comic_id}`.
        append_chapter_path: Append endpoint prefix; the chapter handle is appended.
        upload_path: Single-image multipart upload path.
        tenant_host: Optional tenant host forwarded as `X-Original-Host`.
        auth_token: Optional bearer token (lowest precedence source).
        batch_size: Maximum images per request once batching is chosen.
        ask_image_count: Image count at which batching needs confirmation.
        ask_payload_bytes: Serialized size at which batching needs confirmation.
        force_image_count: Image count at which batching is automatic.
        force_payload_bytes: Serialized size at which batching is automatic.
        create_timeout_seconds: Per-attempt timeout for the creating request.
        append_timeout_seconds: Per-attempt timeout for append requests.
        max_attempts: Total attempts for connection-class failures.
        retry_backoff_base_seconds: First retry delay; doubles per retry.
        retry_backoff_max_seconds: Upper bound of any retry delay.
        inter_batch_delay_seconds: Pause before each append request.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    base_url: str
    create_chapter_path: str = "/api2/comics/{comic_id}/chapters"
    append_chapter_path: str = "/api2/chapters"
    upload_path: str = "/api2/upload/single"
    tenant_host: str | None = None
    auth_token: str | None = None
    batch_size: int = 5
    ask_image_count: int = 10
    ask_payload_bytes: int = 2 * _MEBIBYTE
    force_image_count: int = 20
    force_payload_bytes: int = 5 * _MEBIBYTE
    create_timeout_seconds: float = 120.0
    append_timeout_seconds: float = 60.0
    max_attempts: int = 3
    retry_backoff_base_seconds: float = 1.0
    retry_backoff_max_seconds: float = 8.0
    inter_batch_delay_seconds: float = 0.5
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before publishing."""

        base_url = normalize_optional_string(self.base_url)
        if base_url is None:
            raise ValueError("`base_url` must be a non-empty string.")
        if not base_url.lower().startswith(("http://", "https://")):
            raise ValueError("`base_url` must start with `http://` or `https://`.")
        if "{comic_id}" not in self.create_chapter_path:
            raise ValueError("`create_chapter_path` must contain a `{comic_id}` placeholder.")
        for name in ("create_chapter_path", "append_chapter_path", "upload_path"):
            if not str(getattr(self, name)).startswith("/"):
                raise ValueError(f"`{name}` must start with `/`.")
        if self.create_timeout_seconds <= 0.0 or self.append_timeout_seconds <= 0.0:
            raise ValueError("Request timeouts must be positive.")
        if self.append_timeout_seconds > self.create_timeout_seconds:
            raise ValueError(
                "`append_timeout_seconds` must not exceed `create_timeout_seconds`."
            )
        self.batching_policy()
        self.retry_policy()
        if self.inter_batch_delay_seconds < 0.0:
            raise ValueError("`inter_batch_delay_seconds` must be non-negative.")

    def batching_policy(self) -> BatchingPolicy:
        """Return the batching thresholds as a policy object."""

        return BatchingPolicy(
            batch_size=self.batch_size,
            ask_image_count=self.ask_image_count,
            ask_payload_bytes=self.ask_payload_bytes,
            force_image_count=self.force_image_count,
            force_payload_bytes=self.force_payload_bytes,
        )

    def retry_policy(self) -> RetryPolicy:
        """Return the transport retry policy."""

        return RetryPolicy(
            max_attempts=self.max_attempts,
            backoff_base_seconds=self.retry_backoff_base_seconds,
            backoff_max_seconds=self.retry_backoff_max_seconds,
        )

    def endpoints(self) -> ChapterEndpoints:
        """Return the content-service endpoint layout."""

        return ChapterEndpoints(
            base_url=self.base_url,
            create_chapter_path=self.create_chapter_path,
            append_chapter_path=self.append_chapter_path,
            upload_path=self.upload_path,
        )

    def with_overrides(self, **overrides: Any) -> PublisherConfig:
        """Return a copy with non-`None` overrides applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **applied)

    def resolved_auth_token(self, sources: RuntimeConfigSources | None = None) -> str | None:
        """Resolve the bearer token with deterministic source precedence.

        Precedence is `cli` > `secure` > `env` > config field value.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources
        for mapping, key in (
            (resolved_sources.cli, "auth_token"),
            (resolved_sources.secure, "auth_token"),
            (resolved_sources.env, _AUTH_TOKEN_ENV_KEY),
        ):
            value = self._normalized_lookup(mapping, key)
            if value is not None:
                return value
        return normalize_optional_string(self.auth_token)

    def token_provider(self) -> Callable[[], str | None]:
        """Return a credential provider bound to this config's runtime sources."""

        sources = self.runtime_sources
        return lambda: self.resolved_auth_token(sources)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))


class ConfigLoader:
    """Factory methods for creating `PublisherConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"base_url"})
    _STRING_KEYS = (
        "create_chapter_path",
        "append_chapter_path",
        "upload_path",
        "tenant_host",
        "auth_token",
    )
    _INT_KEYS = (
        "batch_size",
        "ask_image_count",
        "ask_payload_bytes",
        "force_image_count",
        "force_payload_bytes",
        "max_attempts",
    )
    _FLOAT_KEYS = (
        "create_timeout_seconds",
        "append_timeout_seconds",
        "retry_backoff_base_seconds",
        "retry_backoff_max_seconds",
        "inter_batch_delay_seconds",
    )
    _SUPPORTED_YAML_KEYS = frozenset(
        {"base_url", *_STRING_KEYS, *_INT_KEYS, *_FLOAT_KEYS}
    )
    _ENV_PREFIX = "CHAPTERPUSH_"

    @staticmethod
    def from_yaml(path: Path) -> PublisherConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(path_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> PublisherConfig:
        """Create a validated config from `CHAPTERPUSH_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS:
            env_key = f"{ConfigLoader._ENV_PREFIX}{key.upper()}"
            if key == "base_url" or normalize_optional_string(env_map.get(env_key)) is not None:
                payload[key] = env_map.get(env_key)

        if normalize_optional_string(payload.get("base_url")) is None:
            raise ValueError("Environment variable `CHAPTERPUSH_BASE_URL` is required.")
        config = ConfigLoader._build_config_from_mapping(payload, source_label="Environment")
        runtime_env = {
            key: value
            for key, value in env_map.items()
            if key == _AUTH_TOKEN_ENV_KEY and normalize_optional_string(value) is not None
        }
        config.runtime_sources = RuntimeConfigSources(env=runtime_env)
        return config

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> PublisherConfig:
        """Build a validated config from a normalized mapping payload."""

        ConfigLoader._validate_keys(payload, source_label)

        base_url = normalize_optional_string(payload.get("base_url"))
        if base_url is None:
            raise ValueError(f"{source_label} requires non-empty `base_url`.")

        values: dict[str, Any] = {}
        for key in ConfigLoader._STRING_KEYS:
            if key in payload:
                value = normalize_optional_string(payload[key])
                if value is not None:
                    values[key] = value
        for key in ConfigLoader._INT_KEYS:
            if key in payload and payload[key] is not None:
                values[key] = ConfigLoader._typed_value(
                    parse_positive_int, payload[key], key, source_label
                )
        for key in ConfigLoader._FLOAT_KEYS:
            if key in payload and payload[key] is not None:
                values[key] = ConfigLoader._typed_value(
                    parse_non_negative_float, payload[key], key, source_label
                )

        config = PublisherConfig(base_url=base_url.rstrip("/"), **values)
        config.validate()
        return config

    @staticmethod
    def _typed_value(
        parser: Callable[[object, str], Any],
        raw_value: object,
        key: str,
        source_label: str,
    ) -> Any:
        """Parse one typed field and prefix errors with the source label."""

        try:
            return parser(raw_value, key)
        except ValueError as exc:
            raise ValueError(f"{source_label} field {exc}") from exc

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required keys."""

        unknown = sorted(
            str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS)
        )
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(
            key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload
        )
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")
