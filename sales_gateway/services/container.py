"""Application state container owning the repository and its collaborators"""

from dataclasses import dataclass

import httpx

from sales_gateway.config import Settings, settings as default_settings
from sales_gateway.infrastructure.cache.repository import RecordRepository
from sales_gateway.infrastructure.clients.webhook import WebhookClient
from sales_gateway.services.pipeline import SubmissionPipeline
from sales_gateway.services.synchronizer import RecordSynchronizer


@dataclass
class AppContainer:
    settings: Settings
    repository: RecordRepository
    client: WebhookClient
    pipeline: SubmissionPipeline
    synchronizer: RecordSynchronizer


def build_container(
    config: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContainer:
    """Wire one repository, client, pipeline and synchronizer together"""
    config = config or default_settings
    repository = RecordRepository()
    client = WebhookClient(config=config, transport=transport)
    return AppContainer(
        settings=config,
        repository=repository,
        client=client,
        pipeline=SubmissionPipeline(repository, client, config),
        synchronizer=RecordSynchronizer(repository, client, config),
    )
