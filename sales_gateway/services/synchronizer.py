"""Keeps the in-memory repository in step with the remote store and serves list views"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Set

from sales_gateway.config import Settings, settings as default_settings
from sales_gateway.domain.eligibility import transition
from sales_gateway.domain.exceptions import DomainException, RecordNotFound, RowBusy, ValidationRejected
from sales_gateway.domain.identity import normalize_cpf
from sales_gateway.domain.listing import ListQuery, Page, query
from sales_gateway.domain.merge import build_profile
from sales_gateway.domain.models import ClientProfile, ClientStatus, PurchaseRecord, RefreshMode
from sales_gateway.infrastructure.cache.repository import RecordRepository
from sales_gateway.infrastructure.clients.webhook import WebhookClient
from sales_gateway.infrastructure.observability.logging import log_status_change
from sales_gateway.infrastructure.observability.metrics import record_status_change

logger = logging.getLogger(__name__)


class RowActionGuard:
    """Per-row in-progress marker; different rows may act concurrently"""

    def __init__(self):
        self._busy: Set[str] = set()

    def is_busy(self, record_id: str) -> bool:
        return record_id in self._busy

    @contextmanager
    def hold(self, record_id: str) -> Iterator[None]:
        if record_id in self._busy:
            raise RowBusy(f"Another action is already running for record {record_id}")
        self._busy.add(record_id)
        try:
            yield
        finally:
            self._busy.discard(record_id)


class RecordSynchronizer:
    """Refreshes, patches and queries the repository on behalf of the views"""

    def __init__(self, repository: RecordRepository, client: WebhookClient, config: Settings | None = None):
        self.repository = repository
        self.client = client
        self.settings = config or default_settings
        self.guard = RowActionGuard()
        self._closed = False
        self._pending: Set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """The consuming view is gone; scheduled refreshes become no-ops"""
        self._closed = True

    async def refresh(self) -> int:
        """
        Replace the repository with a fresh fetch.

        Network and remote errors propagate; the previous snapshot is kept.
        """
        records = await self.client.fetch_records()
        self.repository.replace_all(records)
        logger.info("Records refreshed", extra={"count": len(self.repository)})
        return len(self.repository)

    def schedule_refresh(self, delay: Optional[float] = None) -> asyncio.Task:
        """One-shot delayed refresh. Not cancellable once scheduled."""
        wait = self.settings.refresh_delay_seconds if delay is None else delay
        task = asyncio.get_running_loop().create_task(self._refresh_later(wait))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _refresh_later(self, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._closed:
            logger.info("Skipping delayed refresh, synchronizer closed")
            return
        try:
            await self.refresh()
        except DomainException as e:
            logger.warning(f"Delayed refresh failed: {e}", extra={"error_type": type(e).__name__})

    async def apply_refresh(self, mode: RefreshMode) -> None:
        if mode is RefreshMode.DELAYED:
            self.schedule_refresh()
        else:
            await self.refresh()

    def _require(self, record_id: str) -> PurchaseRecord:
        record = self.repository.get(record_id)
        if record is None:
            raise RecordNotFound(f"Record {record_id} not found")
        return record

    async def delete_record(self, record_id: str) -> PurchaseRecord:
        """Delete exactly one record remotely, then drop it locally"""
        record = self._require(record_id)
        if not record.has_remote_id:
            raise ValidationRejected("Record is not stored remotely yet; refresh and retry")

        with self.guard.hold(record_id):
            await self.client.delete_record(record_id)
            self.repository.remove(record_id)

        logger.info("Record deleted", extra={"record_id": record_id, "cpf": record.normalized_cpf})
        return record

    async def set_status(self, record_id: str, status: ClientStatus) -> int:
        """
        Reviewer action: set the status for the whole identity of a record.

        Returns the number of local records patched.
        """
        record = self._require(record_id)
        cpf = record.normalized_cpf
        if not cpf:
            raise ValidationRejected("Record has no client ID")

        target = transition(record.client_status, status)
        with self.guard.hold(record_id):
            await self.client.update_status(cpf, target)
            touched = self.repository.broadcast_status(cpf, target)

        record_status_change("reviewer", target.value)
        log_status_change(cpf, target.value, "reviewer", touched)
        return touched

    def view(self, params: ListQuery) -> Page:
        return query(self.repository.all(), params)

    def profile_for(self, cpf: str) -> Optional[ClientProfile]:
        return build_profile(normalize_cpf(cpf), self.repository.all())
