"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Union

from sales_gateway.domain.exceptions import DomainException
from sales_gateway.domain.identity import normalize_cpf
from sales_gateway.domain.installments import calculate_installment_price

PLACEHOLDER_ID_PREFIX = "local-"


class ClientStatus(str, Enum):
    """Eligibility of an identity for new purchases"""

    ELIGIBLE = "apto"
    INELIGIBLE = "no_apto"

    @classmethod
    def parse(cls, raw: object) -> "ClientStatus":
        """Anything that is not an explicit ineligible marker reads as eligible"""
        value = str(raw or "").strip().lower().replace(" ", "_")
        if value in ("no_apto", "ineligible"):
            return cls.INELIGIBLE
        return cls.ELIGIBLE


class PaymentSystem(str, Enum):
    """Installment cadence"""

    DIARIO = "DIARIO"
    SEMANAL = "SEMANAL"
    MENSAL = "MENSAL"

    @property
    def interval_days(self) -> int:
        return {"DIARIO": 1, "SEMANAL": 7, "MENSAL": 30}[self.value]


class RefreshMode(str, Enum):
    """How the caller should resync the repository after a successful save"""

    IMMEDIATE = "immediate"
    DELAYED = "delayed"


# Evidence slot variants


@dataclass(frozen=True)
class Empty:
    """No evidence in this slot"""


@dataclass(frozen=True)
class Reference:
    """Previously uploaded evidence, known by its stored filename"""

    name: str


@dataclass(frozen=True)
class PendingUpload:
    """Local file attached to the current submission, not yet uploaded"""

    content: bytes
    filename: str
    content_type: str = "application/octet-stream"


EvidenceSlot = Union[Empty, Reference, PendingUpload]

EMPTY = Empty()

EVIDENCE_SLOTS = (
    "photoStoreFileName",
    "photoHomeFileName",
    "photoPhoneCodeFileName",
    "photoContractFrontFileName",
    "photoContractBackFileName",
    "photoIdFrontFileName",
    "photoIdBackFileName",
    "photoCpfFileName",
    "photoFaceFileName",
    "photoInstagramFileName",
)

# Belong to the current transaction only; never carried over from history
CONTRACT_SLOTS = frozenset({"photoContractFrontFileName", "photoContractBackFileName"})


def is_empty(slot: EvidenceSlot) -> bool:
    return isinstance(slot, Empty)


def empty_evidence() -> Dict[str, EvidenceSlot]:
    return {slot: EMPTY for slot in EVIDENCE_SLOTS}


@dataclass
class PurchaseRecord:
    """One sale transaction for one client, as stored in the remote spreadsheet"""

    id: str = ""
    timestamp: str = ""

    # Client attributes (repeated on every record of the client)
    client_full_name: str = ""
    client_cpf: str = ""
    phone: str = ""
    work_location: str = ""
    work_address: str = ""
    home_location: str = ""
    home_address: str = ""
    reference1_name: str = ""
    reference1_relationship: str = ""
    reference2_name: str = ""
    reference2_relationship: str = ""
    language: str = ""  # "es" | "pt" | ""
    client_type: str = ""  # "logista" | "funcionario" | ""

    # Transaction attributes
    product: str = ""
    total_product_price: float = 0.0
    down_payment: float = 0.0
    installments: int = 1
    payment_system: PaymentSystem = PaymentSystem.MENSAL
    payment_start_date: Optional[date] = None
    purchase_date: Optional[date] = None
    vendedor: str = ""
    guarantor: str = ""
    store_name: str = ""
    notes: str = ""

    client_status: ClientStatus = ClientStatus.ELIGIBLE
    evidence: Dict[str, EvidenceSlot] = field(default_factory=empty_evidence)

    @property
    def installment_price(self) -> float:
        """Always derived from total, down payment and installment count"""
        return calculate_installment_price(self.total_product_price, self.down_payment, self.installments)

    @property
    def normalized_cpf(self) -> str:
        return normalize_cpf(self.client_cpf)

    @property
    def has_remote_id(self) -> bool:
        """True once the remote store has assigned this record an id"""
        return bool(self.id) and not self.id.startswith(PLACEHOLDER_ID_PREFIX)

    def evidence_for(self, slot: str) -> EvidenceSlot:
        return self.evidence.get(slot, EMPTY)


# Client attributes copied from a profile onto a new purchase
CLIENT_FIELDS = (
    "client_full_name",
    "phone",
    "work_location",
    "work_address",
    "home_location",
    "home_address",
    "reference1_name",
    "reference1_relationship",
    "reference2_name",
    "reference2_relationship",
    "language",
    "client_type",
)


@dataclass
class ClientProfile:
    """Composite of a client's history used to pre-fill a new purchase"""

    normalized_cpf: str
    anchor_id: str
    record_count: int
    client_status: ClientStatus
    contact: Dict[str, str]
    evidence: Dict[str, EvidenceSlot]


@dataclass
class User:
    """Operator allowed to log in, as listed by the users endpoint"""

    identifier: str
    username: str
    password: str
    role: str  # "admin" | "vendedor"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class RecordsChanged:
    """Emitted by the repository after every mutation"""

    reason: str
    count: int


# Submission outcomes


@dataclass
class Accepted:
    record: PurchaseRecord
    created: bool
    refresh: RefreshMode


@dataclass
class Rejected:
    reason: str


@dataclass
class Failed:
    error: DomainException


Outcome = Union[Accepted, Rejected, Failed]
