"""Pytest fixtures for testing"""

import pytest
import httpx
from datetime import date
from typing import Callable, Iterator
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mock_store.webhook_server.main import create_mock_app
from sales_gateway.api.main import create_app
from sales_gateway.config import Settings
from sales_gateway.domain.models import ClientStatus, PurchaseRecord, Reference, empty_evidence
from sales_gateway.services.container import AppContainer, build_container

STORE_BASE = "http://sheet.test"


@pytest.fixture
def test_settings() -> Settings:
    """Every endpoint configured against the in-process mock store"""
    return Settings(
        records_url=f"{STORE_BASE}/records",
        create_webhook_url=f"{STORE_BASE}/records/create",
        update_webhook_url=f"{STORE_BASE}/records/update",
        delete_webhook_url=f"{STORE_BASE}/records/delete",
        status_webhook_url=f"{STORE_BASE}/clients/status",
        users_url=f"{STORE_BASE}/users",
        report_webhook_url=None,
        refresh_delay_seconds=0.01,
        status_after_create="no_apto",
    )


@pytest.fixture
def make_record() -> Callable[..., PurchaseRecord]:
    """Factory for purchase records; evidence given as slot=filename keywords"""

    def _make(record_id: str = "", cpf: str = "12345678901", purchase_date: date | None = None, evidence=None, **fields):
        slots = empty_evidence()
        for slot, name in (evidence or {}).items():
            slots[slot] = Reference(name)
        return PurchaseRecord(
            id=record_id,
            client_cpf=cpf,
            purchase_date=purchase_date,
            evidence=slots,
            **fields,
        )

    return _make


@pytest.fixture
def seed_rows() -> list[dict]:
    """One prior purchase for CPF 123.456.789-01, locked after creation"""
    return [
        {
            "id": "row-1",
            "clientFullName": "Maria Souza",
            "clientCpf": "123.456.789-01",
            "purchaseDate": "2024-01-01",
            "phone": "111",
            "product": "Geladeira",
            "totalProductPrice": "1200",
            "downPayment": "200",
            "installments": "10",
            "paymentSystem": "MENSAL",
            "paymentStartDate": "2024-02-01",
            "clientStatus": ClientStatus.INELIGIBLE.value,
            "photoHomeFileName": "home.jpg",
            "photoContractFrontFileName": "contract-front.jpg",
        },
        {
            "id": "row-2",
            "clientFullName": "Pedro Lima",
            "clientCpf": "987.654.321-00",
            "purchaseDate": "2024-03-10",
            "phone": "222",
            "clientStatus": ClientStatus.ELIGIBLE.value,
        },
    ]


@pytest.fixture
def seed_users() -> list[dict]:
    return [
        {"id": "1", "username": "admin", "password": "admin123", "role": ""},
        {"id": "2", "username": "Lucia", "password": "vendas2024", "role": "vendedor"},
    ]


@pytest.fixture
def mock_store_app(seed_rows: list[dict], seed_users: list[dict]) -> FastAPI:
    return create_mock_app(rows=seed_rows, users=seed_users)


@pytest.fixture
def store_transport(mock_store_app: FastAPI) -> httpx.ASGITransport:
    """Routes webhook calls into the mock store without a network"""
    return httpx.ASGITransport(app=mock_store_app)


@pytest.fixture
def container(test_settings: Settings, store_transport: httpx.ASGITransport) -> AppContainer:
    return build_container(test_settings, transport=store_transport)


@pytest.fixture
def client(container: AppContainer) -> Iterator[TestClient]:
    """Create FastAPI test client wired to the mock store"""
    with TestClient(create_app(container)) as test_client:
        yield test_client
