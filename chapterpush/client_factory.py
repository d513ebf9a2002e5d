"""Construction helpers wiring configuration into transport and publisher objects.

Responsibilities:
- Build the retrying HTTP transport from configured retry settings.
- Build the chapter API client with the configured endpoints, timeouts, and headers.
- Keep CLI command wiring independent from concrete class construction.
"""

from __future__ import annotations

from typing import Callable

import requests

from .config import PublisherConfig
from .telemetry.logger import RunLogger
from .transport.http_client import HttpTransport
from .upload.api import ChapterApiClient
from .upload.publisher import ChapterPublisher
from .upload.reporting import SubmissionObserver


class ClientFactory:
    """Factory for configured transport, API client, and publisher instances."""

    @staticmethod
    def create_transport(
        config: PublisherConfig,
        session: requests.Session | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> HttpTransport:
        """Create the HTTP transport for a config."""

        return HttpTransport(
            session=session,
            retry_policy=config.retry_policy(),
            sleeper=sleeper,
        )

    @staticmethod
    def create_api_client(
        config: PublisherConfig,
        session: requests.Session | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> ChapterApiClient:
        """Create the chapter API client for a config."""

        return ChapterApiClient(
            transport=ClientFactory.create_transport(config, session=session, sleeper=sleeper),
            endpoints=config.endpoints(),
            create_timeout_seconds=config.create_timeout_seconds,
            append_timeout_seconds=config.append_timeout_seconds,
            token_provider=config.token_provider(),
            tenant_host=config.tenant_host,
        )

    @staticmethod
    def create_publisher(
        config: PublisherConfig,
        *,
        api: ChapterApiClient | None = None,
        observer: SubmissionObserver | None = None,
        run_logger: RunLogger | None = None,
    ) -> ChapterPublisher:
        """Create a publisher for a validated config."""

        config.validate()
        return ChapterPublisher(
            api=api if api is not None else ClientFactory.create_api_client(config),
            policy=config.batching_policy(),
            observer=observer,
            run_logger=run_logger,
            inter_batch_delay_seconds=config.inter_batch_delay_seconds,
        )
