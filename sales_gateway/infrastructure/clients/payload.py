"""Wire codec for purchase records and multipart submission payloads"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from sales_gateway.domain.models import (
    EMPTY,
    EVIDENCE_SLOTS,
    ClientStatus,
    EvidenceSlot,
    PaymentSystem,
    PendingUpload,
    PurchaseRecord,
    Reference,
)
from sales_gateway.utils.date_utils import format_date, parse_date

logger = logging.getLogger(__name__)

# Update target key, distinct from the record's own "id" field
TARGET_ID_KEY = "rowId"

# (attribute, wire key) for every scalar field
SCALAR_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("timestamp", "timestamp"),
    ("client_full_name", "clientFullName"),
    ("client_cpf", "clientCpf"),
    ("purchase_date", "purchaseDate"),
    ("phone", "phone"),
    ("product", "product"),
    ("total_product_price", "totalProductPrice"),
    ("down_payment", "downPayment"),
    ("installments", "installments"),
    ("installment_price", "installmentPrice"),
    ("reference1_name", "reference1Name"),
    ("reference1_relationship", "reference1Relationship"),
    ("reference2_name", "reference2Name"),
    ("reference2_relationship", "reference2Relationship"),
    ("language", "language"),
    ("store_name", "storeName"),
    ("work_location", "workLocation"),
    ("work_address", "workAddress"),
    ("home_location", "homeLocation"),
    ("home_address", "homeAddress"),
    ("client_type", "clientType"),
    ("payment_system", "paymentSystem"),
    ("payment_start_date", "paymentStartDate"),
    ("vendedor", "vendedor"),
    ("guarantor", "guarantor"),
    ("notes", "notes"),
    ("client_status", "clientStatus"),
)

FileTuple = Tuple[str, bytes, str]


@dataclass
class SubmissionPayload:
    """Multipart body: text parts in data, binary evidence in files"""

    data: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, FileTuple] = field(default_factory=dict)


def serialize_scalar(value: Any) -> str:
    """Transport-safe string; None becomes "" rather than "null" """
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(_text(value).replace(",", "."))
    except ValueError:
        return default


def _count(value: Any) -> int:
    return max(int(_number(value, 1.0)), 1)


def _payment_system(value: Any) -> PaymentSystem:
    try:
        return PaymentSystem(_text(value).upper())
    except ValueError:
        return PaymentSystem.MENSAL


def _language(raw: Mapping[str, Any]) -> str:
    language = raw.get("language")
    if language is None and isinstance(raw.get("languages"), dict):
        # Older rows stored {"pt": bool, "es": bool}
        return "pt" if raw["languages"].get("pt") else "es"
    return _text(language).lower()


def evidence_from_wire(value: Any) -> EvidenceSlot:
    text = _text(value)
    if not text or text.lower() == "no":
        return EMPTY
    return Reference(text)


def record_from_wire(raw: Mapping[str, Any]) -> PurchaseRecord:
    """
    Build a record from a remote row. Parsing is lenient: missing
    keys take defaults and numbers may arrive as strings. installmentPrice is
    ignored and recomputed.
    """
    return PurchaseRecord(
        id=_text(raw.get("id") or raw.get(TARGET_ID_KEY)),
        timestamp=_text(raw.get("timestamp")),
        client_full_name=_text(raw.get("clientFullName")),
        client_cpf=_text(raw.get("clientCpf")),
        phone=_text(raw.get("phone")),
        work_location=_text(raw.get("workLocation")),
        work_address=_text(raw.get("workAddress")),
        home_location=_text(raw.get("homeLocation")),
        home_address=_text(raw.get("homeAddress")),
        reference1_name=_text(raw.get("reference1Name")),
        reference1_relationship=_text(raw.get("reference1Relationship")),
        reference2_name=_text(raw.get("reference2Name")),
        reference2_relationship=_text(raw.get("reference2Relationship")),
        language=_language(raw),
        client_type=_text(raw.get("clientType")).lower(),
        product=_text(raw.get("product")),
        total_product_price=_number(raw.get("totalProductPrice")),
        down_payment=_number(raw.get("downPayment")),
        installments=_count(raw.get("installments")),
        payment_system=_payment_system(raw.get("paymentSystem")),
        payment_start_date=parse_date(raw.get("paymentStartDate")),
        purchase_date=parse_date(raw.get("purchaseDate")),
        vendedor=_text(raw.get("vendedor")),
        guarantor=_text(raw.get("guarantor")),
        store_name=_text(raw.get("storeName")),
        notes=_text(raw.get("notes")),
        client_status=ClientStatus.parse(raw.get("clientStatus")),
        evidence={slot: evidence_from_wire(raw.get(slot)) for slot in EVIDENCE_SLOTS},
    )


def evidence_text(slot: EvidenceSlot) -> str:
    if isinstance(slot, Reference):
        return slot.name
    if isinstance(slot, PendingUpload):
        return slot.filename
    return ""


def record_to_wire(record: PurchaseRecord) -> Dict[str, str]:
    """Flat string mapping of a record, evidence as filenames (report workflow body)"""
    wire = {key: serialize_scalar(getattr(record, attr)) for attr, key in SCALAR_FIELDS}
    wire["id"] = record.id if record.has_remote_id else ""
    for slot in EVIDENCE_SLOTS:
        wire[slot] = evidence_text(record.evidence_for(slot))
    return wire


def build_submission_payload(
    record: PurchaseRecord,
    attached_files: Optional[Mapping[str, PendingUpload]] = None,
) -> SubmissionPayload:
    """
    Assemble the create/update body.

    Every scalar becomes a text part. An evidence slot is sent either as a
    binary part (newly attached file, named by its original filename) or as
    its text value, never both. Edits also carry the remote id under rowId.
    """
    evidence = dict(record.evidence)
    for slot, upload in (attached_files or {}).items():
        if slot not in EVIDENCE_SLOTS:
            logger.warning("Ignoring attachment for unknown evidence slot", extra={"slot": slot})
            continue
        evidence[slot] = upload

    payload = SubmissionPayload()
    for attr, key in SCALAR_FIELDS:
        payload.data[key] = serialize_scalar(getattr(record, attr))

    if record.has_remote_id:
        payload.data["id"] = record.id
        payload.data[TARGET_ID_KEY] = record.id
    else:
        payload.data["id"] = ""

    for slot in EVIDENCE_SLOTS:
        value = evidence.get(slot, EMPTY)
        if isinstance(value, PendingUpload):
            payload.files[slot] = (value.filename, value.content, value.content_type)
        else:
            payload.data[slot] = evidence_text(value)

    return payload
