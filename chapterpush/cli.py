"""Command-line interface for chapterpush.

Responsibilities:
- Expose user-facing commands for publishing chapters and managing credentials.
- Convert CLI arguments into `PublisherConfig`, chapter metadata, and payloads.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    BatchProgressIndicator,
    echo_batch_plan,
    echo_submission_summary,
    exit_with_command_error,
)
from .cli_runtime import confirm_batching_prompt, resolve_token_runtime_sources
from .client_factory import ClientFactory
from .config import ConfigLoader, PublisherConfig, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import PublishStageError
from .io.image_sources import load_image_payloads
from .models.datatypes import (
    ChapterMetadata,
    SubmissionFailure,
    SubmissionPartialSuccess,
    SubmissionSummary,
)
from .parsing import normalize_optional_string
from .telemetry.logger import RunLogger
from .transport.http_client import TransportError
from .upload.planner import BatchingPolicy, decide_batching, measure_payload_bytes, plan

app = typer.Typer(
    name="chapterpush",
    no_args_is_help=True,
    help="Publish multi-image chapters to a content service.",
)

_PARTIAL_SUCCESS_EXIT_CODE = 2

_FAILURE_HINTS = {
    "no-images": "Pass at least one image file, directory, URL, or data URI.",
    "timeout": (
        "The create request timed out and was not retried. Check whether the chapter "
        "exists before publishing again to avoid a duplicate."
    ),
    "network": "Check connectivity to the content service and retry the command.",
    "server": "Verify the auth token, comic id, and chapter fields, then retry.",
    "missing-handle": (
        "The service did not report a chapter id. Check whether the chapter was "
        "created before publishing again."
    ),
}


def _load_yaml_config(config_path: Path | None) -> PublisherConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PublishStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PublishStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    base_url: str | None,
    tenant_host: str | None,
    batch_size: int | None,
) -> PublisherConfig:
    """Resolve effective command config from YAML, environment, and CLI overrides."""

    loaded_config = _load_yaml_config(config_file)
    try:
        if loaded_config is None:
            if normalize_optional_string(base_url) is not None:
                loaded_config = PublisherConfig(base_url=str(base_url).strip())
            elif normalize_optional_string(os.environ.get("CHAPTERPUSH_BASE_URL")) is not None:
                loaded_config = ConfigLoader.from_env()
            else:
                raise PublishStageError(
                    stage="config",
                    detail="Content service URL is required.",
                    hint=(
                        "Pass `--base-url`, set `CHAPTERPUSH_BASE_URL`, or use "
                        "`--config <path.yaml>` with `base_url`."
                    ),
                )
        config = loaded_config.with_overrides(
            base_url=normalize_optional_string(base_url),
            tenant_host=normalize_optional_string(tenant_host),
            batch_size=batch_size,
        )
        config.validate()
    except ValueError as exc:
        raise PublishStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix the option or config value and rerun.",
        ) from exc
    return config


def _apply_runtime_sources(
    config: PublisherConfig,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
) -> PublisherConfig:
    """Attach runtime source mappings while keeping config defaults intact."""

    return config.with_overrides(
        runtime_sources=RuntimeConfigSources(
            cli=runtime_cli_values,
            secure=runtime_secure_values,
            env=os.environ,
        )
    )


def _build_metadata(
    chapter_number: str,
    title: str,
    description: str | None,
) -> ChapterMetadata:
    """Validate chapter fields and map failures to stage errors."""

    try:
        return ChapterMetadata(
            chapter_number=chapter_number,  # type: ignore[arg-type]
            title=title,
            description=description,
        )
    except ValueError as exc:
        raise PublishStageError(
            stage="metadata",
            detail=str(exc),
            hint="Chapter numbers are positive with up to two decimals, e.g. `12` or `12.5`.",
        ) from exc


def _finish_publish(summary: SubmissionSummary) -> None:
    """Print the summary and exit with the code matching the outcome."""

    echo_submission_summary(summary)
    outcome = summary.outcome
    if isinstance(outcome, SubmissionFailure):
        exit_with_command_error(
            "publish",
            PublishStageError(
                stage="create" if outcome.reason != "no-images" else "images",
                detail=f"No chapter was created ({outcome.reason}).",
                hint=_FAILURE_HINTS.get(outcome.reason),
            ),
        )
    if isinstance(outcome, SubmissionPartialSuccess):
        typer.secho(
            f"Chapter created, but {summary.failed_image_count} of "
            f"{summary.total_images} images are missing.",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=_PARTIAL_SUCCESS_EXIT_CODE)


@app.command("publish")
def publish_command(
    comic_id: Annotated[str, typer.Argument(help="Id of the comic receiving the chapter.")],
    images: Annotated[
        list[str],
        typer.Argument(
            help="Image files, directories, URLs, or data URIs in page order.",
        ),
    ],
    chapter_number: Annotated[
        str,
        typer.Option("--chapter-number", help="Positive chapter number, up to two decimals."),
    ],
    title: Annotated[str, typer.Option("--title", help="Chapter title.")],
    description: Annotated[
        str | None, typer.Option("--description", help="Optional chapter description.")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with publisher settings."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Content service URL (overrides config file value)."),
    ] = None,
    tenant_host: Annotated[
        str | None,
        typer.Option("--tenant-host", help="Tenant host forwarded as `X-Original-Host`."),
    ] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", min=1, help="Images per request when batching."),
    ] = None,
    force_batching: Annotated[
        bool | None,
        typer.Option(
            "--force-batching/--no-force-batching",
            help=(
                "Decide batching for mid-sized chapters without asking. Very large "
                "chapters are always batched and small ones never are."
            ),
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Accept batching without a confirmation prompt."),
    ] = False,
    upload_files: Annotated[
        bool,
        typer.Option(
            "--upload-files/--inline-files",
            help="Upload local files first and send URLs instead of base64 data URIs.",
        ),
    ] = False,
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            help="Auth token override. Prefer `--prompt-token` to avoid shell history.",
        ),
    ] = None,
    prompt_token: Annotated[
        bool,
        typer.Option("--prompt-token", help="Prompt for auth token with hidden input."),
    ] = False,
    store_token: Annotated[
        bool,
        typer.Option(
            "--store-token/--no-store-token",
            help="Persist CLI-entered auth token to secure credential storage.",
        ),
    ] = True,
) -> None:
    """Create a chapter and upload its images, in batches when needed."""

    try:
        metadata = _build_metadata(chapter_number, title, description)
        runtime_cli_values, runtime_secure_values = resolve_token_runtime_sources(
            token=token,
            prompt_token=prompt_token,
            store_token=store_token,
            credential_store_factory=create_credential_store,
        )
        config = _apply_runtime_sources(
            _resolve_command_config(config_file, base_url, tenant_host, batch_size),
            runtime_cli_values=runtime_cli_values,
            runtime_secure_values=runtime_secure_values,
        )
        publisher = ClientFactory.create_publisher(
            config,
            observer=BatchProgressIndicator(command_name="publish"),
            run_logger=RunLogger(),
        )
        try:
            payloads = load_image_payloads(
                images,
                uploader=publisher.api.upload_image if upload_files else None,
            )
        except (OSError, ValueError, TransportError) as exc:
            raise PublishStageError(
                stage="images",
                detail=f"Failed to load images: {exc}",
                hint="Check the image paths, URLs, and upload endpoint, then rerun.",
            ) from exc
        summary = publisher.publish(
            comic_id,
            metadata,
            payloads,
            force_batching=True if yes and force_batching is None else force_batching,
            confirm_batching=confirm_batching_prompt,
        )
    except Exception as exc:
        exit_with_command_error("publish", exc)

    _finish_publish(summary)


@app.command("plan")
def plan_command(
    images: Annotated[
        list[str],
        typer.Argument(help="Image files, directories, URLs, or data URIs in page order."),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with batching settings."),
    ] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", min=1, help="Images per request when batching."),
    ] = None,
) -> None:
    """Show the batching decision and batch layout without contacting the service."""

    try:
        loaded_config = _load_yaml_config(config_file)
        policy = loaded_config.batching_policy() if loaded_config else BatchingPolicy()
        if batch_size is not None:
            policy = replace(policy, batch_size=batch_size)
        try:
            payloads = load_image_payloads(images)
        except (OSError, ValueError) as exc:
            raise PublishStageError(
                stage="images",
                detail=f"Failed to load images: {exc}",
                hint="Check the image paths and URLs, then rerun.",
            ) from exc
        decision = decide_batching(payloads, policy)
        batches = plan(payloads, policy.batch_size)
    except Exception as exc:
        exit_with_command_error("plan", exc)

    echo_batch_plan(decision.value, batches, measure_payload_bytes(payloads))


@app.command("credentials")
def credentials_command(
    set_token: Annotated[
        bool,
        typer.Option(
            "--set-token",
            help="Prompt for auth token with hidden input and store it securely.",
        ),
    ] = False,
    clear_token: Annotated[
        bool,
        typer.Option(
            "--clear-token",
            help="Clear stored auth token from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_token and clear_token:
        exit_with_command_error(
            "credentials",
            PublishStageError(
                stage="credentials",
                detail="`--set-token` and `--clear-token` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_token:
        prompted_token = normalize_optional_string(
            typer.prompt(
                "Auth token (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_token is None:
            exit_with_command_error(
                "credentials",
                PublishStageError(
                    stage="credentials",
                    detail="No auth token entered.",
                    hint="Provide a non-empty token when using `--set-token`.",
                ),
            )
        try:
            credential_store.set_auth_token(prompted_token)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PublishStageError(
                    stage="credentials",
                    detail=f"Failed to store auth token securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("Auth token stored in secure credential storage.")
        return

    if clear_token:
        removed = credential_store.clear_auth_token()
        if removed:
            typer.echo("Stored auth token cleared from secure credential storage.")
        else:
            typer.echo("No stored auth token found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    has_stored_token = credential_store.get_auth_token() is not None
    status = "present" if has_stored_token else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored auth token: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
