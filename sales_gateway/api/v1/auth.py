"""POST /v1/login - verify credentials against the remote users list"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from sales_gateway.api.dependencies import get_container, get_request_id, to_http_exception
from sales_gateway.api.v1.schemas import LoginRequest, UserResponse
from sales_gateway.domain.exceptions import DomainException
from sales_gateway.services.auth import authenticate
from sales_gateway.services.container import AppContainer

router = APIRouter()


@router.post("/login", response_model=UserResponse)
async def login(body: LoginRequest, request: Request, container: AppContainer = Depends(get_container)):
    """
    Authenticate an operator and start a session.

    A successful login rebuilds the record cache from the remote store.
    """
    request_id = get_request_id(request)
    try:
        user = await authenticate(container.client, body.username, body.password)
    except DomainException as e:
        raise to_http_exception(e, request_id)

    if user is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")

    records_loaded = None
    try:
        records_loaded = await container.synchronizer.refresh()
    except DomainException as e:
        logging.warning(f"Initial record fetch failed: {e}", extra={"request_id": request_id})

    return UserResponse(id=user.identifier, username=user.username, role=user.role, records_loaded=records_loaded)
