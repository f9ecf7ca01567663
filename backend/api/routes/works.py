"""
Works API routes.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel

from domain.errors import ValidationFailed
from domain.models import Work
from services.catalog import CatalogService
from services.search_relay import SearchRelay

router = APIRouter()
logger = logging.getLogger(__name__)

EXPORT_FILENAME = "catalog_export.json"


class WorkFields(BaseModel):
    author: str = ""
    title: str = ""
    isbn: str = ""


class WorkResponse(BaseModel):
    id: str
    author: str
    title: str
    isbn: str
    source: str
    from_import: bool


class ImportResponse(BaseModel):
    merged: int


def work_to_response(work: Work) -> WorkResponse:
    """Convert domain Work to API response."""
    return WorkResponse(**work.to_dict())


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_search_relay(request: Request) -> SearchRelay:
    return request.app.state.search_relay


@router.get("/works", response_model=List[WorkResponse])
def list_works(catalog: CatalogService = Depends(get_catalog)):
    """List all works."""
    return [work_to_response(w) for w in catalog.list_works()]


@router.post("/works", response_model=WorkResponse, status_code=201)
def create_work(data: WorkFields, catalog: CatalogService = Depends(get_catalog)):
    """Create a manually entered work."""
    work = catalog.create_work(data.author, data.title, data.isbn)
    logger.info("Created work %s", work.id)
    return work_to_response(work)


@router.get("/works/{work_id}", response_model=WorkResponse)
def get_work(work_id: str, catalog: CatalogService = Depends(get_catalog)):
    """Get a work by ID."""
    return work_to_response(catalog.get_work(work_id))


@router.put("/works/{work_id}", response_model=WorkResponse)
def update_work(work_id: str, data: WorkFields, catalog: CatalogService = Depends(get_catalog)):
    """Replace the author, title and ISBN of a work."""
    return work_to_response(catalog.update_work(work_id, data.author, data.title, data.isbn))


@router.delete("/works/{work_id}")
def delete_work(work_id: str, catalog: CatalogService = Depends(get_catalog)):
    """Delete a work."""
    catalog.delete_work(work_id)
    logger.info("Deleted work %s", work_id)
    return {"status": "deleted"}


@router.get("/export")
def export_catalog(catalog: CatalogService = Depends(get_catalog)):
    """Download the whole catalog as a JSON document."""
    return Response(
        content=catalog.export_snapshot(),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@router.post("/import", response_model=ImportResponse)
def import_works(request: Request, catalog: CatalogService = Depends(get_catalog)):
    """Merge the configured import file into the catalog."""
    import_path = request.app.state.settings.IMPORT_PATH
    return ImportResponse(merged=catalog.import_batch(import_path))


@router.get("/search")
def search(
    query: str = Query(default=""),
    relay: SearchRelay = Depends(get_search_relay),
):
    """Relay a free-text search to Open Library."""
    try:
        upstream = relay.relay(query)
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail={"code": e.code, "message": e.message})
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
    )
