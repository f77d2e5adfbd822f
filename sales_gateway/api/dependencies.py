"""Dependency injection for FastAPI endpoints"""

import logging

from fastapi import Depends, Header, HTTPException, Request

from sales_gateway.domain.exceptions import (
    ConfigurationMissing,
    DomainException,
    NetworkFailure,
    RecordNotFound,
    RemoteRejected,
    ValidationRejected,
)
from sales_gateway.services.container import AppContainer


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_container(request: Request) -> AppContainer:
    """Provide the application state container"""
    return request.app.state.container


def get_role(x_user_role: str = Header("vendedor")) -> str:
    """Role of the caller; session handling lives in front of this service"""
    return "admin" if x_user_role.strip().lower() == "admin" else "vendedor"


def require_admin(role: str = Depends(get_role)) -> str:
    if role != "admin":
        raise HTTPException(status_code=403, detail="Admin role required")
    return role


def to_http_exception(error: DomainException, request_id: str = "unknown") -> HTTPException:
    """Map a domain failure to the response the UI shows"""
    if isinstance(error, ConfigurationMissing):
        logging.error(f"Configuration missing: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=500, detail=str(error))
    if isinstance(error, NetworkFailure):
        logging.error(f"Remote store unreachable: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Remote store unreachable, check the connection")
    if isinstance(error, RemoteRejected):
        logging.error(f"Remote store rejected call: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=502, detail=str(error))
    if isinstance(error, RecordNotFound):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationRejected):
        logging.warning(f"Rejected locally: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=409, detail=str(error))
    logging.error(f"Unexpected domain error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
