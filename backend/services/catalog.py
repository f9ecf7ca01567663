"""
Catalog service: validates primitive inputs and delegates to the store.
"""
from typing import List

from domain.errors import ValidationFailed
from domain.models import Work
from services.catalog_store import CatalogStore
from services.importer import ImportSource, import_batch


def _require_title(title: str | None) -> None:
    # A whitespace-only title counts as missing; values are stored as given
    if not (title or "").strip():
        raise ValidationFailed("Title is required", field="title")


class CatalogService:
    """Mutation and query operations over a catalog store."""

    def __init__(self, store: CatalogStore):
        self.store = store

    def list_works(self) -> List[Work]:
        return self.store.list_all()

    def get_work(self, work_id: str) -> Work:
        return self.store.get(work_id)

    def create_work(self, author: str | None, title: str | None, isbn: str | None) -> Work:
        _require_title(title)
        return self.store.create(author or "", title, isbn or "")

    def update_work(
        self, work_id: str, author: str | None, title: str | None, isbn: str | None
    ) -> Work:
        _require_title(title)
        return self.store.update(work_id, author or "", title, isbn or "")

    def delete_work(self, work_id: str) -> None:
        self.store.delete(work_id)

    def export_snapshot(self) -> bytes:
        return self.store.export_snapshot()

    def import_batch(self, source: ImportSource) -> int:
        return import_batch(self.store, source)
