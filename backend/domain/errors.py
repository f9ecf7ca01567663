"""
Catalog error taxonomy.

Validation and not-found errors are recoverable at the API boundary; store,
import and upstream errors abort the current operation and are surfaced to
the caller as-is.
"""
from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""

    code = "catalog_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(CatalogError):
    code = "not_found"

    def __init__(self, work_id: str):
        super().__init__(f"Work not found: {work_id}")
        self.work_id = work_id


class ValidationFailed(CatalogError):
    code = "validation_failed"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class StoreUnavailable(CatalogError):
    code = "store_unavailable"


class ImportSourceUnreadable(CatalogError):
    code = "import_source_unreadable"


class UpstreamUnavailable(CatalogError):
    code = "upstream_unavailable"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
