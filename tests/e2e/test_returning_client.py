"""
E2E tests for a returning client against the mock sheet store.

The store is seeded with one prior purchase for CPF 123.456.789-01
(2024-01-01, phone "111", home photo "home.jpg", status no_apto).

Journeys:
- seller types the CPF with punctuation: form pre-fills, submission blocked
- reviewer re-enables the client: the purchase goes through and the client
  is locked again automatically
"""

import pytest
from fastapi.testclient import TestClient

ADMIN = {"X-User-Role": "admin"}
TYPED_CPF = "123.456.789-01"


def draft_form(draft: dict) -> dict:
    """The seller's form as submitted: pre-filled client data plus the new transaction"""
    return {
        "clientFullName": draft["client_full_name"],
        "clientCpf": TYPED_CPF,
        "phone": draft["phone"],
        "purchaseDate": "2024-06-01",
        "product": "Televisor",
        "totalProductPrice": "1500",
        "downPayment": "300",
        "installments": "12",
        "paymentSystem": "SEMANAL",
        "clientStatus": draft["client_status"],
        **{slot: name or "" for slot, name in draft["evidence"].items()},
    }


@pytest.mark.integration
def test_returning_ineligible_client_is_prefilled_and_blocked(client: TestClient, mock_store_app):
    """
    Seller starts a new purchase for a locked client
    Expected: history pre-fills the form, submission answers "not eligible"
    """
    login = client.post("/v1/login", json={"username": "Lucia", "password": "vendas2024"})
    assert login.status_code == 200
    assert login.json()["records_loaded"] == 2

    profile = client.get(f"/v1/profiles/{TYPED_CPF}")
    assert profile.status_code == 200
    draft = profile.json()["draft"]
    assert draft["phone"] == "111"
    assert draft["evidence"]["photoHomeFileName"] == "home.jpg"
    assert profile.json()["eligible"] is False

    response = client.post("/v1/records", data=draft_form(draft))

    assert response.status_code == 409
    assert response.json()["detail"] == "not eligible"
    assert "create_record" not in mock_store_app.state.store.calls


@pytest.mark.integration
def test_reviewer_reenables_client_then_purchase_relocks(client: TestClient, mock_store_app):
    """
    Reviewer sets the client back to eligible, then a new purchase is submitted
    Expected: every record reads eligible, creation succeeds, client is locked again
    """
    store = mock_store_app.state.store
    client.post("/v1/login", json={"username": "admin", "password": "admin123"})

    status = client.put("/v1/records/row-1/status", json={"status": "apto"}, headers=ADMIN)
    assert status.status_code == 200

    records = client.get("/v1/records", params={"q": "12345678901"}).json()["items"]
    assert records and all(r["client_status"] == "apto" for r in records)

    draft = client.get(f"/v1/profiles/{TYPED_CPF}").json()["draft"]
    response = client.post("/v1/records", data=draft_form(draft), headers=ADMIN)

    assert response.status_code == 200
    assert response.json()["created"] is True
    assert store.calls[store.calls.index("create_record") + 1] == "update_status"

    records = client.get("/v1/records", params={"q": "12345678901"}).json()["items"]
    assert len(records) == 2
    assert all(r["client_status"] == "no_apto" for r in records)
