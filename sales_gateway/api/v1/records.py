"""Record list, lookup, refresh and reviewer actions"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from sales_gateway.api.dependencies import get_container, get_request_id, require_admin, to_http_exception
from sales_gateway.api.v1.schemas import (
    DeleteResponse,
    PageResponse,
    RecordSchema,
    RefreshResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from sales_gateway.domain.exceptions import DomainException
from sales_gateway.domain.listing import SORT_KEYS, ListQuery
from sales_gateway.services.container import AppContainer

router = APIRouter()


@router.get("/records", response_model=PageResponse)
def list_records(
    q: str = Query("", description="CPF search, punctuation ignored"),
    sort: str | None = Query(None, description="name | identity | purchase_date | status"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=500),
    container: AppContainer = Depends(get_container),
):
    """
    Filtered, sorted and paginated view of the cached records.

    Returns:
        One page of records with paging metadata
    """
    if sort is not None and sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"Unknown sort key: {sort}")

    result = container.synchronizer.view(
        ListQuery(
            search=q,
            sort_by=sort,
            descending=order == "desc",
            page=page,
            page_size=page_size or container.settings.default_page_size,
        )
    )

    return PageResponse(
        items=[RecordSchema.from_record(r) for r in result.items],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        pages=result.pages,
    )


@router.post("/records/refresh", response_model=RefreshResponse)
async def refresh_records(request: Request, container: AppContainer = Depends(get_container)):
    """Re-fetch every record from the remote store"""
    try:
        count = await container.synchronizer.refresh()
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return RefreshResponse(count=count)


@router.get("/records/{record_id}", response_model=RecordSchema)
def get_record(record_id: str, container: AppContainer = Depends(get_container)):
    record = container.repository.get(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    return RecordSchema.from_record(record)


@router.delete("/records/{record_id}", response_model=DeleteResponse, dependencies=[Depends(require_admin)])
async def delete_record(record_id: str, request: Request, container: AppContainer = Depends(get_container)):
    """Delete exactly one purchase record (never the whole client)"""
    try:
        await container.synchronizer.delete_record(record_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return DeleteResponse(record_id=record_id, deleted=True)


@router.put("/records/{record_id}/status", response_model=StatusUpdateResponse, dependencies=[Depends(require_admin)])
async def update_status(
    record_id: str,
    body: StatusUpdateRequest,
    request: Request,
    container: AppContainer = Depends(get_container),
):
    """
    Reviewer action: set eligibility for every record of this record's client.
    """
    try:
        touched = await container.synchronizer.set_status(record_id, body.status)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    record = container.repository.get(record_id)
    return StatusUpdateResponse(
        cpf=record.normalized_cpf if record else "",
        status=body.status,
        records_updated=touched,
    )
