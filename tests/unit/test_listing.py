"""Unit tests for filtered, sorted and paginated record views"""

from datetime import date

import pytest

from sales_gateway.domain.listing import ListQuery, filter_by_identity, paginate, query, sort_records
from sales_gateway.domain.models import ClientStatus


@pytest.fixture
def records(make_record):
    return [
        make_record("a", cpf="111.111.111-11", client_full_name="carla", purchase_date=date(2024, 3, 1)),
        make_record("b", cpf="222.222.222-22", client_full_name="Ana", purchase_date=date(2024, 1, 1)),
        make_record(
            "c",
            cpf="111.111.111-11",
            client_full_name="Bruno",
            purchase_date=date(2024, 1, 1),
            client_status=ClientStatus.INELIGIBLE,
        ),
    ]


def test_search_ignores_punctuation(records):
    """Test formatted and raw search terms match the same records"""
    assert [r.id for r in filter_by_identity(records, "111.111")] == ["a", "c"]
    assert [r.id for r in filter_by_identity(records, "111111")] == ["a", "c"]


def test_search_without_digits_matches_all(records):
    assert len(filter_by_identity(records, "")) == 3
    assert len(filter_by_identity(records, "abc")) == 3


def test_sort_by_name_case_insensitive(records):
    assert [r.id for r in sort_records(records, "name")] == ["b", "c", "a"]


def test_sort_is_stable_in_both_directions(records):
    """Test equal dates keep their relative order ascending and descending"""
    assert [r.id for r in sort_records(records, "purchase_date")] == ["b", "c", "a"]
    assert [r.id for r in sort_records(records, "purchase_date", descending=True)] == ["a", "b", "c"]


def test_sort_unknown_key(records):
    with pytest.raises(ValueError):
        sort_records(records, "price")


def test_paginate_clamps_out_of_range(records):
    page = paginate(records, page=9, page_size=2)

    assert page.page == 2
    assert [r.id for r in page.items] == ["c"]
    assert page.total == 3
    assert page.pages == 2


def test_paginate_empty():
    page = paginate([], page=1, page_size=20)
    assert page.items == []
    assert page.pages == 0


def test_query_does_not_mutate_input(records):
    """Test filter, sort and paginate leave the source order untouched"""
    original = [r.id for r in records]

    page = query(records, ListQuery(search="111", sort_by="name", page=1, page_size=1))

    assert [r.id for r in page.items] == ["c"]
    assert page.total == 2
    assert [r.id for r in records] == original
