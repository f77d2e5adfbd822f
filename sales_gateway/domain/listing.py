"""Filtered, sorted and paginated views over the record set"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Sequence

from sales_gateway.domain.identity import normalize_cpf
from sales_gateway.domain.models import PurchaseRecord

SORT_KEYS: Dict[str, Callable[[PurchaseRecord], object]] = {
    "name": lambda r: r.client_full_name.casefold(),
    "identity": lambda r: r.normalized_cpf,
    "purchase_date": lambda r: r.purchase_date or date.min,
    "status": lambda r: r.client_status.value,
}


@dataclass
class ListQuery:
    """Parameters of a list view"""

    search: str = ""
    sort_by: str | None = None
    descending: bool = False
    page: int = 1
    page_size: int = 20


@dataclass
class Page:
    """One page of records plus paging metadata"""

    items: List[PurchaseRecord]
    page: int
    page_size: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


def filter_by_identity(records: Sequence[PurchaseRecord], term: str) -> List[PurchaseRecord]:
    """Substring match on the normalized CPF; a term without digits matches everything"""
    needle = normalize_cpf(term)
    if not needle:
        return list(records)
    return [r for r in records if needle in r.normalized_cpf]


def sort_records(records: Sequence[PurchaseRecord], sort_by: str | None, descending: bool = False) -> List[PurchaseRecord]:
    """Stable sort; equal keys keep their original relative order in both directions"""
    if not sort_by:
        return list(records)
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")
    return sorted(records, key=SORT_KEYS[sort_by], reverse=descending)


def paginate(records: Sequence[PurchaseRecord], page: int, page_size: int) -> Page:
    """Slice out a 1-based page; out-of-range pages are clamped"""
    size = max(page_size, 1)
    total = len(records)
    last_page = max(math.ceil(total / size), 1)
    current = min(max(page, 1), last_page)
    start = (current - 1) * size
    return Page(items=list(records[start:start + size]), page=current, page_size=size, total=total)


def query(records: Sequence[PurchaseRecord], params: ListQuery) -> Page:
    """Filter, then sort, then paginate. The input sequence is never mutated."""
    filtered = filter_by_identity(records, params.search)
    ordered = sort_records(filtered, params.sort_by, params.descending)
    return paginate(ordered, params.page, params.page_size)
