"""Unit tests for the returning-client profile merge"""

from datetime import date

from sales_gateway.domain.merge import apply_profile, build_profile, records_by_recency
from sales_gateway.domain.models import (
    EMPTY,
    ClientStatus,
    PendingUpload,
    PurchaseRecord,
    Reference,
    empty_evidence,
)


def test_no_history_returns_none(make_record):
    records = [make_record("r1", cpf="11111111111", purchase_date=date(2024, 1, 1))]
    assert build_profile("22222222222", records) is None


def test_empty_key_matches_nothing(make_record):
    """Test records without a CPF never form a profile"""
    records = [make_record("r1", cpf="", purchase_date=date(2024, 1, 1))]
    assert build_profile("", records) is None
    assert records_by_recency("", records) == []


def test_anchor_is_most_recent_purchase(make_record):
    """Test contact data comes from the newest record regardless of input order"""
    records = [
        make_record("old", purchase_date=date(2023, 5, 1), phone="111", client_full_name="Maria"),
        make_record("new", purchase_date=date(2024, 2, 1), phone="222", client_full_name="Maria S."),
    ]

    profile = build_profile("12345678901", records)

    assert profile.anchor_id == "new"
    assert profile.record_count == 2
    assert profile.contact["phone"] == "222"
    assert profile.contact["client_full_name"] == "Maria S."


def test_matching_ignores_cpf_formatting(make_record):
    records = [make_record("r1", cpf="123.456.789-01", purchase_date=date(2024, 1, 1))]
    profile = build_profile("123.456.789-01", records)
    assert profile.normalized_cpf == "12345678901"


def test_evidence_coalesces_from_older_records(make_record):
    """Test an empty slot on the anchor falls back to an older purchase"""
    records = [
        make_record("old", purchase_date=date(2023, 1, 1), evidence={"photoHomeFileName": "home-old.jpg"}),
        make_record("new", purchase_date=date(2024, 1, 1), evidence={"photoFaceFileName": "face-new.jpg"}),
    ]

    profile = build_profile("12345678901", records)

    assert profile.evidence["photoHomeFileName"] == Reference("home-old.jpg")
    assert profile.evidence["photoFaceFileName"] == Reference("face-new.jpg")
    assert profile.evidence["photoStoreFileName"] == EMPTY


def test_newest_non_empty_evidence_wins(make_record):
    records = [
        make_record("old", purchase_date=date(2023, 1, 1), evidence={"photoHomeFileName": "home-old.jpg"}),
        make_record("new", purchase_date=date(2024, 1, 1), evidence={"photoHomeFileName": "home-new.jpg"}),
    ]
    profile = build_profile("12345678901", records)
    assert profile.evidence["photoHomeFileName"] == Reference("home-new.jpg")


def test_contract_slots_always_empty(make_record):
    """Test contract photos never carry over from history"""
    records = [
        make_record(
            "r1",
            purchase_date=date(2024, 1, 1),
            evidence={"photoContractFrontFileName": "cf.jpg", "photoContractBackFileName": "cb.jpg"},
        )
    ]

    profile = build_profile("12345678901", records)

    assert profile.evidence["photoContractFrontFileName"] == EMPTY
    assert profile.evidence["photoContractBackFileName"] == EMPTY


def test_status_taken_from_anchor(make_record):
    records = [
        make_record("old", purchase_date=date(2023, 1, 1), client_status=ClientStatus.ELIGIBLE),
        make_record("new", purchase_date=date(2024, 1, 1), client_status=ClientStatus.INELIGIBLE),
    ]
    assert build_profile("12345678901", records).client_status is ClientStatus.INELIGIBLE


def test_equal_dates_keep_arrival_order(make_record):
    """Test ties are resolved by arrival order"""
    records = [
        make_record("first", purchase_date=date(2024, 1, 1), phone="111"),
        make_record("second", purchase_date=date(2024, 1, 1), phone="222"),
    ]
    assert build_profile("12345678901", records).anchor_id == "first"


def test_undated_records_sort_last(make_record):
    records = [
        make_record("undated", purchase_date=None),
        make_record("dated", purchase_date=date(2020, 1, 1)),
    ]
    assert [r.id for r in records_by_recency("12345678901", records)] == ["dated", "undated"]


def test_merge_does_not_mutate_inputs(make_record):
    record = make_record("r1", purchase_date=date(2024, 1, 1), evidence={"photoHomeFileName": "home.jpg"})
    before = dict(record.evidence)

    build_profile("12345678901", [record])

    assert record.evidence == before


def test_apply_profile_prefills_draft(make_record):
    """Test contact, status and non-contract evidence are copied onto the draft"""
    history = [
        make_record(
            "r1",
            purchase_date=date(2024, 1, 1),
            phone="111",
            client_status=ClientStatus.INELIGIBLE,
            evidence={"photoHomeFileName": "home.jpg", "photoContractFrontFileName": "cf.jpg"},
        )
    ]
    profile = build_profile("12345678901", history)
    draft = PurchaseRecord(client_cpf="123.456.789-01", product="TV", total_product_price=900)

    filled = apply_profile(draft, profile)

    assert filled.phone == "111"
    assert filled.client_status is ClientStatus.INELIGIBLE
    assert filled.evidence["photoHomeFileName"] == Reference("home.jpg")
    assert filled.evidence["photoContractFrontFileName"] == EMPTY
    assert filled.product == "TV"
    assert filled.client_cpf == "123.456.789-01"
    assert draft.phone == ""


def test_apply_profile_keeps_attached_files(make_record):
    """Test a file the user already attached is not replaced by history"""
    history = [make_record("r1", purchase_date=date(2024, 1, 1), evidence={"photoHomeFileName": "home.jpg"})]
    profile = build_profile("12345678901", history)
    upload = PendingUpload(content=b"img", filename="new-home.jpg", content_type="image/jpeg")
    evidence = empty_evidence()
    evidence["photoHomeFileName"] = upload

    filled = apply_profile(PurchaseRecord(client_cpf="12345678901", evidence=evidence), profile)

    assert filled.evidence["photoHomeFileName"] is upload
