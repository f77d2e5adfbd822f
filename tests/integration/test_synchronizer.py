"""Integration tests for repository refresh, reviewer actions and list views"""

import httpx
import pytest

from sales_gateway.domain.exceptions import (
    ConfigurationMissing,
    RecordNotFound,
    RemoteRejected,
    RowBusy,
    ValidationRejected,
)
from sales_gateway.domain.listing import ListQuery
from sales_gateway.domain.models import ClientStatus, PurchaseRecord, RefreshMode
from sales_gateway.services.container import build_container


async def test_refresh_loads_store(container):
    count = await container.synchronizer.refresh()

    assert count == 2
    assert container.repository.get("row-1").client_status is ClientStatus.INELIGIBLE


async def test_failed_refresh_keeps_previous_snapshot(test_settings):
    """Test the last known good set survives a remote error"""
    responses = iter([httpx.Response(200, json=[{"id": "row-1"}]), httpx.Response(500, text="boom")])
    container = build_container(test_settings, transport=httpx.MockTransport(lambda request: next(responses)))

    await container.synchronizer.refresh()
    with pytest.raises(RemoteRejected):
        await container.synchronizer.refresh()

    assert container.repository.get("row-1") is not None


async def test_delayed_refresh_runs_once(container, mock_store_app):
    task = container.synchronizer.schedule_refresh(delay=0.01)
    await task

    assert len(container.repository) == 2
    assert mock_store_app.state.store.calls.count("list_records") == 1


async def test_delayed_refresh_skipped_after_close(container, mock_store_app):
    """Test a pending refresh is a no-op once its consumer is gone"""
    task = container.synchronizer.schedule_refresh(delay=0.01)
    container.synchronizer.close()
    await task

    assert len(container.repository) == 0
    assert "list_records" not in mock_store_app.state.store.calls


async def test_delayed_refresh_failure_is_logged(test_settings):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    container = build_container(test_settings, transport=httpx.MockTransport(refuse))

    await container.synchronizer.schedule_refresh(delay=0)

    assert len(container.repository) == 0


async def test_apply_refresh_modes(container, mock_store_app):
    await container.synchronizer.apply_refresh(RefreshMode.IMMEDIATE)
    assert len(container.repository) == 2

    await container.synchronizer.apply_refresh(RefreshMode.DELAYED)
    assert len(container.synchronizer._pending) == 1
    await next(iter(container.synchronizer._pending))
    assert mock_store_app.state.store.calls.count("list_records") == 2


async def test_delete_single_record(container, mock_store_app):
    """Test delete removes exactly one record remotely and locally"""
    await container.synchronizer.refresh()

    deleted = await container.synchronizer.delete_record("row-2")

    assert deleted.id == "row-2"
    assert "row-2" not in mock_store_app.state.store.rows
    assert container.repository.get("row-2") is None
    assert container.repository.get("row-1") is not None


async def test_delete_unknown_record(container):
    with pytest.raises(RecordNotFound):
        await container.synchronizer.delete_record("row-404")


async def test_delete_placeholder_record(container, mock_store_app):
    """Test records not yet stored remotely cannot be deleted"""
    container.repository.upsert(PurchaseRecord(id="local-123", client_cpf="55555555555"))

    with pytest.raises(ValidationRejected):
        await container.synchronizer.delete_record("local-123")

    assert "delete_record" not in mock_store_app.state.store.calls


async def test_busy_row_rejects_second_action(container, mock_store_app):
    """Test a row with an action in flight refuses another one"""
    await container.synchronizer.refresh()

    with container.synchronizer.guard.hold("row-1"):
        with pytest.raises(RowBusy):
            await container.synchronizer.delete_record("row-1")
        # Other rows are unaffected
        await container.synchronizer.delete_record("row-2")

    assert "row-1" in mock_store_app.state.store.rows
    assert not container.synchronizer.guard.is_busy("row-1")


async def test_set_status_broadcasts_to_identity(container, mock_store_app):
    """Test a reviewer re-enable reaches the store and every local record of the client"""
    await container.synchronizer.refresh()

    touched = await container.synchronizer.set_status("row-1", ClientStatus.ELIGIBLE)

    assert touched == 1
    assert mock_store_app.state.store.rows["row-1"]["clientStatus"] == "apto"
    assert container.repository.get("row-1").client_status is ClientStatus.ELIGIBLE
    assert container.repository.get("row-2").client_status is ClientStatus.ELIGIBLE


async def test_set_status_requires_endpoint(test_settings, store_transport):
    settings = test_settings.model_copy(update={"status_webhook_url": None})
    container = build_container(settings, transport=store_transport)
    await container.synchronizer.refresh()

    with pytest.raises(ConfigurationMissing):
        await container.synchronizer.set_status("row-1", ClientStatus.ELIGIBLE)

    assert container.repository.get("row-1").client_status is ClientStatus.INELIGIBLE


async def test_set_status_without_cpf(container):
    container.repository.upsert(PurchaseRecord(id="row-9", client_cpf=""))

    with pytest.raises(ValidationRejected):
        await container.synchronizer.set_status("row-9", ClientStatus.INELIGIBLE)


async def test_view_and_profile(container):
    await container.synchronizer.refresh()

    page = container.synchronizer.view(ListQuery(search="987", page_size=10))
    profile = container.synchronizer.profile_for("123.456.789-01")

    assert [r.id for r in page.items] == ["row-2"]
    assert profile.anchor_id == "row-1"
    assert container.synchronizer.profile_for("000.000.000-00") is None
