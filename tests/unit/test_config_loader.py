"""Unit tests for publisher configuration loading, validation, and precedence."""

from __future__ import annotations

from pathlib import Path

import pytest

from chapterpush.client_factory import ClientFactory
from chapterpush.config import ConfigLoader, PublisherConfig, RuntimeConfigSources


def _write_yaml(tmp_path: Path, text: str) -> Path:
    """Write a YAML config fixture and return its path."""

    path = tmp_path / "chapterpush.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_from_yaml_loads_typed_values(tmp_path: Path) -> None:
    """YAML values should be parsed into typed config fields."""

    path = _write_yaml(
        tmp_path,
        "\n".join(
            [
                "base_url: https://studio.example.com/",
                "tenant_host: tenant.example.com",
                "batch_size: '4'",
                "create_timeout_seconds: 90",
                "append_timeout_seconds: 30.5",
                "inter_batch_delay_seconds: 0",
                "max_attempts: 5",
            ]
        ),
    )

    config = ConfigLoader.from_yaml(path)

    assert config.base_url == "https://studio.example.com"
    assert config.tenant_host == "tenant.example.com"
    assert config.batch_size == 4
    assert config.create_timeout_seconds == 90.0
    assert config.append_timeout_seconds == 30.5
    assert config.inter_batch_delay_seconds == 0.0
    assert config.retry_policy().max_attempts == 5
    assert config.batching_policy().batch_size == 4


def test_from_yaml_rejects_unknown_keys(tmp_path: Path) -> None:
    """Unsupported keys should produce an actionable error."""

    path = _write_yaml(tmp_path, "base_url: https://studio.example.com\nbatchsize: 4\n")

    with pytest.raises(ValueError, match="unsupported key\\(s\\): batchsize"):
        ConfigLoader.from_yaml(path)


def test_from_yaml_requires_base_url(tmp_path: Path) -> None:
    """Configs without `base_url` should be rejected."""

    path = _write_yaml(tmp_path, "batch_size: 4\n")

    with pytest.raises(ValueError, match="missing required key\\(s\\): base_url"):
        ConfigLoader.from_yaml(path)


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("base_url: https://studio.example.com\nbatch_size: 0\n", "batch_size"),
        ("base_url: ftp://studio.example.com\n", "http"),
        ("- not\n- a mapping\n", "top-level mapping"),
        ("base_url: [unclosed\n", "not valid YAML"),
        (
            "base_url: https://studio.example.com\n"
            "create_timeout_seconds: 10\nappend_timeout_seconds: 20\n",
            "append_timeout_seconds",
        ),
        (
            "base_url: https://studio.example.com\ncreate_chapter_path: /api2/chapters\n",
            "comic_id",
        ),
    ],
    ids=["zero-batch", "scheme", "list-root", "broken-yaml", "timeouts", "path-template"],
)
def test_from_yaml_rejects_invalid_values(tmp_path: Path, text: str, message: str) -> None:
    """Invalid values should fail with a message naming the problem."""

    path = _write_yaml(tmp_path, text)

    with pytest.raises(ValueError, match=message):
        ConfigLoader.from_yaml(path)


def test_from_env_reads_prefixed_variables() -> None:
    """Environment config should read `CHAPTERPUSH_*` keys and keep the token source."""

    config = ConfigLoader.from_env(
        {
            "CHAPTERPUSH_BASE_URL": "https://studio.example.com",
            "CHAPTERPUSH_BATCH_SIZE": "3",
            "CHAPTERPUSH_AUTH_TOKEN": "env-token",
            "UNRELATED": "ignored",
        }
    )

    assert config.batch_size == 3
    assert config.resolved_auth_token() == "env-token"


def test_from_env_requires_base_url() -> None:
    """Environment config without a base URL should be rejected."""

    with pytest.raises(ValueError, match="CHAPTERPUSH_BASE_URL"):
        ConfigLoader.from_env({"CHAPTERPUSH_BATCH_SIZE": "3"})


def test_auth_token_precedence_is_cli_secure_env_config() -> None:
    """Token resolution should prefer CLI, then secure storage, then env, then config."""

    config = PublisherConfig(base_url="https://studio.example.com", auth_token="config-token")
    env = {"CHAPTERPUSH_AUTH_TOKEN": "env-token"}

    assert (
        config.resolved_auth_token(
            RuntimeConfigSources(
                cli={"auth_token": "cli-token"},
                secure={"auth_token": "secure-token"},
                env=env,
            )
        )
        == "cli-token"
    )
    assert (
        config.resolved_auth_token(
            RuntimeConfigSources(secure={"auth_token": "secure-token"}, env=env)
        )
        == "secure-token"
    )
    assert config.resolved_auth_token(RuntimeConfigSources(env=env)) == "env-token"
    assert config.resolved_auth_token(RuntimeConfigSources(cli={"auth_token": "  "})) == (
        "config-token"
    )


def test_with_overrides_ignores_none_values() -> None:
    """Only explicitly provided overrides should replace config values."""

    config = PublisherConfig(base_url="https://studio.example.com", batch_size=5)

    updated = config.with_overrides(batch_size=None, tenant_host="tenant.example.com")

    assert updated.batch_size == 5
    assert updated.tenant_host == "tenant.example.com"
    assert config.tenant_host is None


def test_client_factory_wires_config_into_publisher() -> None:
    """The factory should apply retry, timeout, endpoint, and batching settings."""

    config = PublisherConfig(
        base_url="https://studio.example.com",
        tenant_host="tenant.example.com",
        batch_size=3,
        max_attempts=4,
        create_timeout_seconds=100.0,
        append_timeout_seconds=50.0,
        runtime_sources=RuntimeConfigSources(cli={"auth_token": "cli-token"}),
    )

    publisher = ClientFactory.create_publisher(config)

    assert publisher.policy.batch_size == 3
    assert publisher.api.create_timeout_seconds == 100.0
    assert publisher.api.append_timeout_seconds == 50.0
    assert publisher.api.endpoints.create_url("c1").startswith("https://studio.example.com/")
    transport = publisher.api.transport
    assert getattr(transport, "retry_policy").max_attempts == 4


def test_client_factory_validates_config() -> None:
    """Invalid configs should be rejected before any client is built."""

    with pytest.raises(ValueError, match="base_url"):
        ClientFactory.create_publisher(PublisherConfig(base_url="studio.example.com"))
