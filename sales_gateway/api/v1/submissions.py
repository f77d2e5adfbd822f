"""POST /v1/records - create or update a purchase record"""

import logging
import time
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.datastructures import UploadFile

from sales_gateway.api.dependencies import get_container, get_request_id, get_role, to_http_exception
from sales_gateway.api.v1.schemas import SubmissionResponse
from sales_gateway.domain.exceptions import DomainException
from sales_gateway.domain.models import EVIDENCE_SLOTS, Failed, PendingUpload, RefreshMode, Rejected
from sales_gateway.infrastructure.clients.payload import record_from_wire
from sales_gateway.infrastructure.observability.logging import log_submission
from sales_gateway.services.container import AppContainer

router = APIRouter()


async def _read_form(request: Request) -> tuple[Dict[str, str], Dict[str, PendingUpload]]:
    """Split a multipart form into text fields and attached evidence files"""
    form = await request.form()
    fields: Dict[str, str] = {}
    files: Dict[str, PendingUpload] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in EVIDENCE_SLOTS and value.filename:
                files[key] = PendingUpload(
                    content=await value.read(),
                    filename=value.filename,
                    content_type=value.content_type or "application/octet-stream",
                )
            continue
        fields[key] = value
    return fields, files


@router.post("/records", response_model=SubmissionResponse)
async def submit_record(
    request: Request,
    role: str = Depends(get_role),
    container: AppContainer = Depends(get_container),
):
    """
    Submit a purchase as multipart/form-data.

    Flow:
    1. Parse text fields into a record (installment price is recomputed)
    2. Run the submission pipeline (gate, route, dispatch, post-create lock)
    3. Refresh the repository now, or schedule a delayed refresh
    4. Return the outcome
    """
    start_time = time.time()
    request_id = get_request_id(request)

    fields, files = await _read_form(request)
    record = record_from_wire(fields)
    outcome = await container.pipeline.submit(record, files, role=role)

    duration_ms = (time.time() - start_time) * 1000
    created = not record.has_remote_id

    if isinstance(outcome, Rejected):
        log_submission(request_id, record.normalized_cpf, "rejected", created, duration_ms, outcome.reason)
        raise HTTPException(status_code=409, detail=outcome.reason)

    if isinstance(outcome, Failed):
        log_submission(request_id, record.normalized_cpf, "failed", created, duration_ms, str(outcome.error))
        raise to_http_exception(outcome.error, request_id)

    log_submission(request_id, record.normalized_cpf, "accepted", outcome.created, duration_ms)

    try:
        await container.synchronizer.apply_refresh(outcome.refresh)
    except DomainException as e:
        # The save already succeeded; the list catches up on the next refresh
        logging.warning(f"Refresh after save failed: {e}", extra={"request_id": request_id})

    return SubmissionResponse(
        outcome="accepted",
        record_id=outcome.record.id,
        created=outcome.created,
        refresh=outcome.refresh.value,
        refresh_delay_seconds=(
            container.settings.refresh_delay_seconds if outcome.refresh is RefreshMode.DELAYED else 0.0
        ),
    )
