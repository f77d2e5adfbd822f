"""In-memory record repository - last known good snapshot of the remote store"""

import dataclasses
import logging
from typing import Callable, Dict, Iterable, List, Optional

from sales_gateway.domain.models import ClientStatus, PurchaseRecord, RecordsChanged

logger = logging.getLogger(__name__)

Listener = Callable[[RecordsChanged], None]


class RecordRepository:
    """
    Process-lifetime cache of purchase records keyed by record id.

    The remote store is the source of truth: the whole set is swapped on every
    fetch and only patched optimistically between fetches.
    """

    def __init__(self, records: Iterable[PurchaseRecord] = ()):
        self._records: Dict[str, PurchaseRecord] = {}
        self._listeners: List[Listener] = []
        if records:
            self._records = self._index(records)

    @staticmethod
    def _index(records: Iterable[PurchaseRecord]) -> Dict[str, PurchaseRecord]:
        indexed: Dict[str, PurchaseRecord] = {}
        for record in records:
            if not record.id:
                logger.warning("Skipping record without id", extra={"cpf": record.client_cpf})
                continue
            indexed[record.id] = record
        return indexed

    def __len__(self) -> int:
        return len(self._records)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a records-changed listener; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, reason: str) -> None:
        event = RecordsChanged(reason=reason, count=len(self._records))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Records-changed listener failed", extra={"reason": reason})

    def replace_all(self, records: Iterable[PurchaseRecord]) -> None:
        """Swap in a new snapshot; readers never see a partially built set"""
        self._records = self._index(records)
        self._notify("replaced")

    def all(self) -> List[PurchaseRecord]:
        """Snapshot in arrival order"""
        return list(self._records.values())

    def get(self, record_id: str) -> Optional[PurchaseRecord]:
        return self._records.get(record_id)

    def find_by_identity(self, normalized_cpf: str) -> List[PurchaseRecord]:
        """All records of one identity; an empty key matches nothing"""
        if not normalized_cpf:
            return []
        return [r for r in self._records.values() if r.normalized_cpf == normalized_cpf]

    def upsert(self, record: PurchaseRecord) -> None:
        records = dict(self._records)
        records[record.id] = record
        self._records = records
        self._notify("upserted")

    def remove(self, record_id: str) -> bool:
        if record_id not in self._records:
            return False
        records = dict(self._records)
        del records[record_id]
        self._records = records
        self._notify("removed")
        return True

    def broadcast_status(self, normalized_cpf: str, status: ClientStatus) -> int:
        """Set the status on every record of the identity; returns how many were touched"""
        if not normalized_cpf:
            return 0
        records = dict(self._records)
        touched = 0
        for record_id, record in records.items():
            if record.normalized_cpf == normalized_cpf:
                records[record_id] = dataclasses.replace(record, client_status=status)
                touched += 1
        self._records = records
        self._notify("status_changed")
        return touched
