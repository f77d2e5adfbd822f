"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from sales_gateway.domain.models import ClientProfile, ClientStatus, PurchaseRecord
from sales_gateway.infrastructure.clients.payload import evidence_text


class LoginRequest(BaseModel):
    """Request body for POST /v1/login"""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Response for POST /v1/login"""

    id: str
    username: str
    role: str
    records_loaded: Optional[int] = None


class RecordSchema(BaseModel):
    """One purchase record"""

    id: str
    timestamp: str
    client_full_name: str
    client_cpf: str
    phone: str
    work_location: str
    work_address: str
    home_location: str
    home_address: str
    reference1_name: str
    reference1_relationship: str
    reference2_name: str
    reference2_relationship: str
    language: str
    client_type: str
    product: str
    total_product_price: float
    down_payment: float
    installments: int
    installment_price: float
    payment_system: str
    payment_start_date: Optional[date] = None
    purchase_date: Optional[date] = None
    vendedor: str
    guarantor: str
    store_name: str
    notes: str
    client_status: ClientStatus
    evidence: Dict[str, Optional[str]]

    @classmethod
    def from_record(cls, record: PurchaseRecord) -> "RecordSchema":
        return cls(
            id=record.id,
            timestamp=record.timestamp,
            client_full_name=record.client_full_name,
            client_cpf=record.client_cpf,
            phone=record.phone,
            work_location=record.work_location,
            work_address=record.work_address,
            home_location=record.home_location,
            home_address=record.home_address,
            reference1_name=record.reference1_name,
            reference1_relationship=record.reference1_relationship,
            reference2_name=record.reference2_name,
            reference2_relationship=record.reference2_relationship,
            language=record.language,
            client_type=record.client_type,
            product=record.product,
            total_product_price=record.total_product_price,
            down_payment=record.down_payment,
            installments=record.installments,
            installment_price=record.installment_price,
            payment_system=record.payment_system.value,
            payment_start_date=record.payment_start_date,
            purchase_date=record.purchase_date,
            vendedor=record.vendedor,
            guarantor=record.guarantor,
            store_name=record.store_name,
            notes=record.notes,
            client_status=record.client_status,
            evidence={slot: evidence_text(value) or None for slot, value in record.evidence.items()},
        )


class PageResponse(BaseModel):
    """Response for GET /v1/records"""

    items: List[RecordSchema]
    page: int
    page_size: int
    total: int
    pages: int


class ProfileResponse(BaseModel):
    """Response for GET /v1/profiles/{cpf}"""

    cpf: str
    anchor_id: str
    record_count: int
    client_status: ClientStatus
    eligible: bool
    contact: Dict[str, str]
    evidence: Dict[str, Optional[str]]
    draft: RecordSchema

    @classmethod
    def from_profile(cls, profile: ClientProfile, draft: PurchaseRecord) -> "ProfileResponse":
        return cls(
            cpf=profile.normalized_cpf,
            anchor_id=profile.anchor_id,
            record_count=profile.record_count,
            client_status=profile.client_status,
            eligible=profile.client_status is ClientStatus.ELIGIBLE,
            contact=profile.contact,
            evidence={slot: evidence_text(value) or None for slot, value in profile.evidence.items()},
            draft=RecordSchema.from_record(draft),
        )


class SubmissionResponse(BaseModel):
    """Response for POST /v1/records"""

    outcome: str
    record_id: str
    created: bool
    refresh: str
    refresh_delay_seconds: float = 0.0


class StatusUpdateRequest(BaseModel):
    """Request body for PUT /v1/records/{record_id}/status"""

    status: ClientStatus


class StatusUpdateResponse(BaseModel):
    cpf: str
    status: ClientStatus
    records_updated: int


class DeleteResponse(BaseModel):
    record_id: str
    deleted: bool


class RefreshResponse(BaseModel):
    count: int


class InstallmentSchema(BaseModel):
    """Single installment in a payment schedule"""

    number: int
    due_date: date
    amount_cents: int


class ScheduleResponse(BaseModel):
    """Response for GET /v1/records/{record_id}/schedule"""

    record_id: str
    payment_system: str
    installment_price: float
    installments: List[InstallmentSchema]
