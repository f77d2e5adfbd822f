"""Merge engine - composite client profile from a client's purchase history"""

import dataclasses
from datetime import date
from typing import Dict, Iterable, List, Optional

from sales_gateway.domain.identity import normalize_cpf
from sales_gateway.domain.models import (
    CLIENT_FIELDS,
    CONTRACT_SLOTS,
    EMPTY,
    EVIDENCE_SLOTS,
    ClientProfile,
    EvidenceSlot,
    PendingUpload,
    PurchaseRecord,
    is_empty,
)


def records_by_recency(normalized_cpf: str, all_records: Iterable[PurchaseRecord]) -> List[PurchaseRecord]:
    """
    Records of one identity, most recent purchase first.

    Ties keep arrival order; records without a purchase date go last.
    An empty key matches nothing.
    """
    if not normalized_cpf:
        return []

    matches = [r for r in all_records if r.normalized_cpf == normalized_cpf]
    # sorted() is stable, so equal dates keep arrival order
    return sorted(matches, key=lambda r: r.purchase_date or date.min, reverse=True)


def build_profile(normalized_cpf: str, all_records: Iterable[PurchaseRecord]) -> Optional[ClientProfile]:
    """
    Build the pre-fill profile for a returning client.

    Algorithm:
    - Anchor = most recent purchase; contact data and eligibility come from it
    - Each evidence slot takes the first non-empty value in recency order
      (left-biased coalesce), so an empty slot on the anchor falls back to
      older purchases
    - Contract photos belong to a single transaction and always start empty

    Returns None when the identity has no history.
    """
    history = records_by_recency(normalize_cpf(normalized_cpf), all_records)
    if not history:
        return None

    anchor = history[0]

    evidence: Dict[str, EvidenceSlot] = {}
    for slot in EVIDENCE_SLOTS:
        if slot in CONTRACT_SLOTS:
            evidence[slot] = EMPTY
            continue
        evidence[slot] = next(
            (r.evidence_for(slot) for r in history if not is_empty(r.evidence_for(slot))),
            EMPTY,
        )

    return ClientProfile(
        normalized_cpf=anchor.normalized_cpf,
        anchor_id=anchor.id,
        record_count=len(history),
        client_status=anchor.client_status,
        contact={name: getattr(anchor, name) for name in CLIENT_FIELDS},
        evidence=evidence,
    )


def apply_profile(draft: PurchaseRecord, profile: ClientProfile) -> PurchaseRecord:
    """
    Pre-fill a new purchase draft from a client profile.

    Transaction fields and the CPF as typed are kept. Slots the user already
    attached a file to are not overwritten.
    """
    evidence = dict(draft.evidence)
    for slot, value in profile.evidence.items():
        if slot in CONTRACT_SLOTS or isinstance(evidence.get(slot), PendingUpload):
            continue
        evidence[slot] = value

    return dataclasses.replace(
        draft,
        client_status=profile.client_status,
        evidence=evidence,
        **profile.contact,
    )
