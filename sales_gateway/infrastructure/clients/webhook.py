"""Webhook HTTP client for the spreadsheet-backed record store"""

import logging
from typing import Any, List, Optional

import httpx

from sales_gateway.config import Settings, settings as default_settings
from sales_gateway.domain.exceptions import ConfigurationMissing, NetworkFailure, ParseFailure, RemoteRejected
from sales_gateway.domain.models import ClientStatus, PurchaseRecord, User
from sales_gateway.infrastructure.clients.payload import SubmissionPayload, record_from_wire, record_to_wire
from sales_gateway.infrastructure.clients.response_shapes import unwrap_items
from sales_gateway.infrastructure.observability.metrics import (
    fetch_parse_failures_counter,
    webhook_failure_counter,
    webhook_latency_histogram,
)

logger = logging.getLogger(__name__)

MAX_DETAIL_CHARS = 500


def extract_remote_detail(response: httpx.Response) -> str:
    """Best-effort human readable error from a rejected webhook call"""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()[:MAX_DETAIL_CHARS]

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])[:MAX_DETAIL_CHARS]
    return str(body)[:MAX_DETAIL_CHARS]


def user_from_wire(raw: dict, admin_username: str) -> Optional[User]:
    """Users are admins by explicit role or by the privileged username, case-insensitively"""
    username = str(raw.get("username") or raw.get("displayName") or raw.get("name") or "").strip()
    if not username:
        return None
    role_field = str(raw.get("role") or "").strip().lower()
    is_admin = role_field == "admin" or username.lower() == admin_username.strip().lower()
    return User(
        identifier=str(raw.get("id") or raw.get("identifier") or username),
        username=username,
        password=str(raw.get("password") or raw.get("secret") or ""),
        role="admin" if is_admin else "vendedor",
    )


class WebhookClient:
    """Client for the remote store's webhook workflows"""

    def __init__(
        self,
        config: Settings | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = config or default_settings
        self.timeout = timeout or self.settings.http_timeout_seconds
        self._transport = transport

    def _url(self, setting_name: str, required: bool) -> Optional[str]:
        """
        Resolve a configured endpoint.

        Raises:
            ConfigurationMissing: endpoint unset and required for the operation
        """
        url = getattr(self.settings, setting_name)
        if url:
            return url
        if required:
            raise ConfigurationMissing(setting_name)
        logger.warning(f"{setting_name.upper()} not set, skipping call", extra={"setting": setting_name})
        return None

    async def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        One call, no retries.

        Raises:
            NetworkFailure: timeout or transport error
            RemoteRejected: non-2xx response
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            try:
                with webhook_latency_histogram.labels(operation=operation).time():
                    response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response

            except httpx.TimeoutException as e:
                webhook_failure_counter.labels(operation=operation).inc()
                raise NetworkFailure(f"{operation} timed out after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                webhook_failure_counter.labels(operation=operation).inc()
                raise RemoteRejected(e.response.status_code, extract_remote_detail(e.response)) from e
            except httpx.RequestError as e:
                webhook_failure_counter.labels(operation=operation).inc()
                raise NetworkFailure(f"{operation} failed: {e}") from e

    async def _fetch_items(self, operation: str, url: str) -> List[Any]:
        """GET a list endpoint; unrecognized shapes count as an empty list"""
        response = await self._request(operation, "GET", url)
        if not response.content.strip():
            return []
        try:
            return unwrap_items(response.json())
        except (ValueError, ParseFailure) as e:
            fetch_parse_failures_counter.labels(operation=operation).inc()
            logger.warning(f"Treating {operation} response as empty: {e}", extra={"operation": operation})
            return []

    async def fetch_records(self) -> List[PurchaseRecord]:
        """
        Fetch every purchase record.

        An unconfigured endpoint or an unrecognized body yields no records.
        """
        url = self._url("records_url", required=False)
        if url is None:
            return []

        records = []
        for item in await self._fetch_items("fetch_records", url):
            if not isinstance(item, dict):
                logger.warning("Skipping non-object record item", extra={"item_type": type(item).__name__})
                continue
            records.append(record_from_wire(item))
        return records

    async def fetch_users(self) -> List[User]:
        """Fetch login-capable users (required for authentication)"""
        url = self._url("users_url", required=True)
        users = []
        for item in await self._fetch_items("fetch_users", url):
            user = user_from_wire(item, self.settings.admin_username) if isinstance(item, dict) else None
            if user is not None:
                users.append(user)
        return users

    async def submit(self, payload: SubmissionPayload, update: bool) -> None:
        """
        Send a create or update as multipart/form-data.

        Text fields become filename-less parts so the body is multipart even
        without attachments.
        """
        setting_name = "update_webhook_url" if update else "create_webhook_url"
        url = self._url(setting_name, required=True)
        parts: List[Any] = [(key, (None, value)) for key, value in payload.data.items()]
        parts.extend((slot, upload) for slot, upload in payload.files.items())
        await self._request("submit_update" if update else "submit_create", "POST", url, files=parts)

    async def delete_record(self, record_id: str) -> None:
        url = self._url("delete_webhook_url", required=True)
        await self._request("delete_record", "POST", url, json={"id": record_id})

    async def update_status(self, normalized_cpf: str, status: ClientStatus, required: bool = True) -> bool:
        """
        Broadcast a status to every record of the identity.

        Returns False when skipped because the endpoint is optional and unset.
        """
        url = self._url("status_webhook_url", required=required)
        if url is None:
            return False
        await self._request("update_status", "POST", url, json={"cpf": normalized_cpf, "status": status.value})
        return True

    async def send_report(self, record: PurchaseRecord) -> bool:
        """Mirror a saved record to the optional report workflow"""
        url = self._url("report_webhook_url", required=False)
        if url is None:
            return False
        await self._request("send_report", "POST", url, json=record_to_wire(record))
        return True
