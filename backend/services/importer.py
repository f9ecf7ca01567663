"""
Importer service.

Translates an externally exported catalog (records keyed by ``books_id``
with ``primaryauthor`` / ``originalisbn`` fields) into native works and
merges them into the store. A batch is parsed completely before anything
is written, so a bad document leaves the catalog unchanged.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from domain.errors import ImportSourceUnreadable
from domain.models import ImportedWork, Work
from services.catalog_store import CatalogStore
from settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_SOURCE = "import"

ImportSource = Union[str, Path, Mapping[str, Any]]


def read_import_document(path: str | Path) -> Dict[str, Any]:
    """Load the raw import document from disk."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ImportSourceUnreadable(f"Import file not found: {path}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportSourceUnreadable(f"Cannot read import file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ImportSourceUnreadable(f"Import file {path} must contain a JSON object")
    return raw


def _imported_work(key: str, entry: Any) -> ImportedWork:
    if not isinstance(entry, dict):
        raise ImportSourceUnreadable(f"Import record {key!r} is not an object")
    for name in ("books_id", "primaryauthor", "title", "originalisbn", "source"):
        if name in entry and not isinstance(entry[name], str):
            raise ImportSourceUnreadable(
                f"Import record {key!r}: {name} must be a string, got {entry[name]!r}"
            )
    # The mapping key stands in for a missing books_id, never for a bad one
    books_id = entry.get("books_id", key)
    if not books_id:
        raise ImportSourceUnreadable(f"Import record {key!r} without books_id")
    return ImportedWork(
        books_id=books_id,
        primaryauthor=entry.get("primaryauthor", ""),
        title=entry.get("title", ""),
        originalisbn=entry.get("originalisbn", ""),
        source=entry.get("source", ""),
    )


def translate_batch(document: Mapping[str, Any], default_source: str = DEFAULT_IMPORT_SOURCE) -> List[Work]:
    """Map every external record to a native work; fails on the first bad record."""
    return [
        _imported_work(str(key), entry).to_work(default_source)
        for key, entry in document.items()
    ]


def import_batch(store: CatalogStore, source: ImportSource) -> int:
    """
    Merge an import batch into the catalog.

    Args:
        store: Catalog to merge into.
        source: Path to a JSON import document, or an already decoded mapping.

    Returns:
        Number of distinct works merged.

    Raises:
        ImportSourceUnreadable: the batch cannot be loaded or parsed. Nothing
            is written in that case.
    """
    if isinstance(source, (str, Path)):
        document: Mapping[str, Any] = read_import_document(source)
    elif isinstance(source, Mapping):
        document = source
    else:
        raise ImportSourceUnreadable(f"Unsupported import source: {type(source).__name__}")

    works = translate_batch(document)
    merged = store.merge(works)
    logger.info("Imported %d works", merged)
    return merged


def import_on_startup(store: CatalogStore, settings: Settings) -> int:
    """Run the configured startup import; a requested but unreadable import is fatal."""
    if not settings.IMPORT_ON_START:
        logger.info("Startup import not requested; skipping")
        return 0
    logger.info("Importing works from %s", settings.IMPORT_PATH)
    try:
        return import_batch(store, settings.IMPORT_PATH)
    except ImportSourceUnreadable as e:
        logger.warning("Startup import failed: %s", e)
        raise
