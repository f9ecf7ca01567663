"""Centralized error transformation for API routes.

Maps catalog errors to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException, Request
from fastapi.exception_handlers import http_exception_handler

from domain.errors import (
    CatalogError,
    ImportSourceUnreadable,
    NotFound,
    StoreUnavailable,
    UpstreamUnavailable,
    ValidationFailed,
)

ERROR_STATUS_MAP: dict[type[CatalogError], int] = {
    NotFound: 404,
    ValidationFailed: 422,
    ImportSourceUnreadable: 422,
    StoreUnavailable: 503,
    UpstreamUnavailable: 502,
}


def map_catalog_error(error: CatalogError) -> HTTPException:
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }
    if isinstance(error, ValidationFailed) and error.field is not None:
        detail["field"] = error.field
    if isinstance(error, UpstreamUnavailable) and error.upstream_status is not None:
        detail["upstream_status"] = error.upstream_status
    status_code = ERROR_STATUS_MAP.get(type(error), 500)
    return HTTPException(status_code=status_code, detail=detail)


async def catalog_error_handler(request: Request, exc: CatalogError):
    return await http_exception_handler(request, map_catalog_error(exc))
