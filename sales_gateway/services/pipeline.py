"""Submission pipeline - gate, route and dispatch a purchase record to the remote store"""

import dataclasses
import logging
import uuid
from typing import Mapping, Optional

from sales_gateway.config import Settings, settings as default_settings
from sales_gateway.domain.eligibility import (
    check_new_purchase,
    requires_post_create_lock,
    resolve_status,
    status_after_create,
)
from sales_gateway.domain.exceptions import DomainException, ValidationRejected
from sales_gateway.domain.merge import build_profile
from sales_gateway.domain.models import (
    PLACEHOLDER_ID_PREFIX,
    Accepted,
    ClientStatus,
    Failed,
    Outcome,
    PendingUpload,
    PurchaseRecord,
    Reference,
    RefreshMode,
    Rejected,
)
from sales_gateway.infrastructure.cache.repository import RecordRepository
from sales_gateway.infrastructure.clients.payload import build_submission_payload
from sales_gateway.infrastructure.clients.webhook import WebhookClient
from sales_gateway.infrastructure.observability.logging import log_status_change
from sales_gateway.infrastructure.observability.metrics import (
    cascade_failure_counter,
    record_status_change,
    record_submission,
)
from sales_gateway.utils.date_utils import submission_timestamp

logger = logging.getLogger(__name__)

NOT_LOADED = "record not loaded, refresh and retry"


class SubmissionPipeline:
    """Orchestrates one create or update of a purchase record"""

    def __init__(self, repository: RecordRepository, client: WebhookClient, config: Settings | None = None):
        self.repository = repository
        self.client = client
        self.settings = config or default_settings

    def refresh_mode(self, role: str, created: bool) -> RefreshMode:
        """Sellers' creations run through an asynchronous remote workflow; wait before re-reading"""
        if created and role != "admin":
            return RefreshMode.DELAYED
        return RefreshMode.IMMEDIATE

    async def submit(
        self,
        record: PurchaseRecord,
        attached_files: Optional[Mapping[str, PendingUpload]] = None,
        role: str = "vendedor",
    ) -> Outcome:
        """
        Submit a purchase record.

        Flow:
        1. Local eligibility gate (new purchases only, no network on rejection);
           edits keep the identity's current status, whatever the form sent
        2. Route to the create or update webhook by presence of a remote id
        3. Assemble the multipart payload
        4. Dispatch once
        5. After a creation: insert an optimistic copy and lock the identity (best-effort)
        6. Mirror to the report workflow (best-effort)
        """
        updating = record.has_remote_id
        cpf = record.normalized_cpf

        if not updating:
            try:
                check_new_purchase(cpf, self.repository.all())
            except ValidationRejected as e:
                record_submission("rejected", created=True)
                return Rejected(str(e))
            record = self._stamp_new(record)
        else:
            current = self._current_status(record)
            if current is None:
                record_submission("rejected", created=False)
                return Rejected(NOT_LOADED)
            record = dataclasses.replace(record, client_status=current)

        payload = build_submission_payload(record, attached_files)

        try:
            await self.client.submit(payload, update=updating)
        except DomainException as e:
            record_submission("failed", created=not updating)
            logger.error(f"Submission failed: {e}", extra={"cpf": cpf, "error_type": type(e).__name__})
            return Failed(e)

        record_submission("accepted", created=not updating)
        saved = self._as_saved(record, attached_files)

        if not updating:
            self.repository.upsert(saved)
            if cpf and requires_post_create_lock(self.settings.status_after_create):
                await self._lock_after_create(cpf)

        await self._mirror_report(saved)

        return Accepted(record=saved, created=not updating, refresh=self.refresh_mode(role, not updating))

    def _current_status(self, record: PurchaseRecord) -> Optional[ClientStatus]:
        """
        Status an edit must carry. Only reviewer actions change eligibility.

        Returns None when neither the identity nor the record is loaded.
        """
        profile = build_profile(record.normalized_cpf, self.repository.all())
        if profile is not None:
            return resolve_status(profile)
        stored = self.repository.get(record.id)
        return stored.client_status if stored else None

    def _stamp_new(self, record: PurchaseRecord) -> PurchaseRecord:
        return dataclasses.replace(
            record,
            timestamp=record.timestamp or submission_timestamp(),
            client_status=status_after_create(self.settings.status_after_create),
        )

    @staticmethod
    def _as_saved(record: PurchaseRecord, attached_files: Optional[Mapping[str, PendingUpload]]) -> PurchaseRecord:
        """Local view of the stored record: uploads become references, new rows get a placeholder id"""
        evidence = dict(record.evidence)
        for slot, upload in (attached_files or {}).items():
            if slot in evidence:
                evidence[slot] = upload
        evidence = {
            slot: Reference(value.filename) if isinstance(value, PendingUpload) else value
            for slot, value in evidence.items()
        }
        record_id = record.id or f"{PLACEHOLDER_ID_PREFIX}{uuid.uuid4()}"
        return dataclasses.replace(record, id=record_id, evidence=evidence)

    async def _lock_after_create(self, cpf: str) -> None:
        """A purchase provisionally locks the identity; failure never undoes the purchase"""
        try:
            sent = await self.client.update_status(cpf, ClientStatus.INELIGIBLE, required=False)
        except DomainException as e:
            cascade_failure_counter.inc()
            logger.warning(f"Post-create eligibility lock failed: {e}", extra={"cpf": cpf})
            return

        if sent:
            touched = self.repository.broadcast_status(cpf, ClientStatus.INELIGIBLE)
            record_status_change("post_create", ClientStatus.INELIGIBLE.value)
            log_status_change(cpf, ClientStatus.INELIGIBLE.value, "post_create", touched)

    async def _mirror_report(self, record: PurchaseRecord) -> None:
        try:
            await self.client.send_report(record)
        except DomainException as e:
            logger.warning(f"Report workflow failed: {e}", extra={"cpf": record.normalized_cpf})
