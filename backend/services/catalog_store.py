"""
Catalog store.

The store is the sole owner of the work collection. Two interchangeable
backings implement the same contract:

- ``JsonCatalogStore``: the whole catalog lives in one JSON document that
  is read and rewritten in full on every mutation, under a process lock.
- ``SqlCatalogStore``: one row per work in a SQLAlchemy-managed table.
"""
from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from db import init_db, make_engine, make_session_factory
from domain.errors import NotFound, StoreUnavailable
from domain.models import Work
from repositories import WorksRepository
from settings import Settings
from storage.file_storage import CatalogFile

logger = logging.getLogger(__name__)


def encode_catalog(works: Dict[str, Work]) -> bytes:
    """Serialize an id -> Work mapping deterministically."""
    document = {work_id: work.to_dict() for work_id, work in works.items()}
    return json.dumps(document, sort_keys=True, indent=2, ensure_ascii=False).encode("utf-8")


def decode_catalog(data: bytes) -> Dict[str, Work]:
    """
    Parse a catalog document back into an id -> Work mapping.

    Raises:
        ValueError: the document is not a JSON object of record objects.
    """
    raw = json.loads(data.decode("utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("catalog document must be a JSON object")
    works: Dict[str, Work] = {}
    for key, entry in raw.items():
        if not isinstance(entry, dict):
            raise ValueError(f"catalog entry {key!r} is not an object")
        work = Work.from_dict({"id": key, **entry})
        works[work.id] = work
    return works


class CatalogStore(ABC):
    """Contract shared by every catalog backing."""

    @abstractmethod
    def list_all(self) -> List[Work]:
        ...

    @abstractmethod
    def get(self, work_id: str) -> Work:
        ...

    @abstractmethod
    def create(self, author: str, title: str, isbn: str) -> Work:
        ...

    @abstractmethod
    def update(self, work_id: str, author: str, title: str, isbn: str) -> Work:
        ...

    @abstractmethod
    def delete(self, work_id: str) -> None:
        ...

    @abstractmethod
    def merge(self, works: Iterable[Work]) -> int:
        """Upsert works by id; an existing entry is overwritten entirely."""

    def export_snapshot(self) -> bytes:
        return encode_catalog({w.id: w for w in self.list_all()})


class JsonCatalogStore(CatalogStore):
    """Flat-file catalog; every operation holds the lock across read-modify-write."""

    def __init__(self, path: str | Path):
        self.file = CatalogFile(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Work]:
        data = self.file.read_bytes()
        if data is None:
            # No catalog yet: bootstrap empty
            return {}
        try:
            return decode_catalog(data)
        except (ValueError, KeyError) as e:
            logger.warning("Catalog file %s is malformed: %s", self.file.path, e)
            raise StoreUnavailable(f"Catalog file {self.file.path} is malformed: {e}") from e

    def _save(self, works: Dict[str, Work]) -> None:
        self.file.write_bytes(encode_catalog(works))

    def list_all(self) -> List[Work]:
        with self._lock:
            return list(self._load().values())

    def get(self, work_id: str) -> Work:
        with self._lock:
            works = self._load()
        if work_id not in works:
            raise NotFound(work_id)
        return works[work_id]

    def create(self, author: str, title: str, isbn: str) -> Work:
        with self._lock:
            works = self._load()
            work = Work.new_manual(author, title, isbn)
            while work.id in works:
                work = Work.new_manual(author, title, isbn)
            works[work.id] = work
            self._save(works)
        logger.debug("Created work %s", work.id)
        return work

    def update(self, work_id: str, author: str, title: str, isbn: str) -> Work:
        with self._lock:
            works = self._load()
            if work_id not in works:
                raise NotFound(work_id)
            work = works[work_id].with_fields(author, title, isbn)
            works[work_id] = work
            self._save(works)
        logger.debug("Updated work %s", work_id)
        return work

    def delete(self, work_id: str) -> None:
        with self._lock:
            works = self._load()
            if work_id not in works:
                raise NotFound(work_id)
            del works[work_id]
            self._save(works)
        logger.debug("Deleted work %s", work_id)

    def merge(self, works: Iterable[Work]) -> int:
        incoming = {w.id: w for w in works}
        with self._lock:
            current = self._load()
            for work in incoming.values():
                current[work.id] = work
            self._save(current)
        return len(incoming)

    def export_snapshot(self) -> bytes:
        with self._lock:
            return encode_catalog(self._load())


class SqlCatalogStore(CatalogStore):
    """
    Relational catalog.

    Single statements run in their own session transaction. Flows that read
    before writing (update, delete, merge) are additionally serialized with
    a process lock.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = make_session_factory(engine)
        self._repo = WorksRepository()
        self._lock = threading.Lock()
        try:
            init_db(engine)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Cannot initialize catalog database: {e}") from e

    @classmethod
    def from_url(cls, database_url: str) -> "SqlCatalogStore":
        return cls(make_engine(database_url))

    def _fail(self, action: str, error: SQLAlchemyError) -> StoreUnavailable:
        logger.warning("Catalog database %s failed: %s", action, error)
        return StoreUnavailable(f"Catalog database {action} failed: {error}")

    def list_all(self) -> List[Work]:
        try:
            with self._session_factory() as session:
                return self._repo.list_works(session)
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e

    def get(self, work_id: str) -> Work:
        try:
            with self._session_factory() as session:
                work = self._repo.get_work(session, work_id)
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e
        if work is None:
            raise NotFound(work_id)
        return work

    def create(self, author: str, title: str, isbn: str) -> Work:
        work = Work.new_manual(author, title, isbn)
        try:
            with self._session_factory() as session:
                saved = self._repo.create_work(session, work)
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e
        logger.debug("Created work %s", saved.id)
        return saved

    def update(self, work_id: str, author: str, title: str, isbn: str) -> Work:
        with self._lock:
            try:
                with self._session_factory() as session:
                    work = self._repo.update_fields(session, work_id, author, title, isbn)
            except SQLAlchemyError as e:
                raise self._fail("update", e) from e
        if work is None:
            raise NotFound(work_id)
        logger.debug("Updated work %s", work_id)
        return work

    def delete(self, work_id: str) -> None:
        with self._lock:
            try:
                with self._session_factory() as session:
                    deleted = self._repo.delete_work(session, work_id)
            except SQLAlchemyError as e:
                raise self._fail("delete", e) from e
        if not deleted:
            raise NotFound(work_id)
        logger.debug("Deleted work %s", work_id)

    def merge(self, works: Iterable[Work]) -> int:
        incoming = {w.id: w for w in works}
        with self._lock:
            try:
                with self._session_factory() as session:
                    return self._repo.upsert_works(session, incoming.values())
            except SQLAlchemyError as e:
                raise self._fail("merge", e) from e


def build_catalog_store(settings: Settings) -> CatalogStore:
    """Select the catalog backing configured in settings."""
    backend = settings.CATALOG_BACKEND
    if backend == "json":
        logger.info("Using JSON catalog at %s", settings.CATALOG_PATH)
        return JsonCatalogStore(settings.CATALOG_PATH)
    if backend == "sqlite":
        logger.info("Using SQL catalog at %s", settings.CATALOG_DATABASE_URL)
        return SqlCatalogStore.from_url(settings.CATALOG_DATABASE_URL)
    raise ValueError(f"Unknown catalog backend: {backend}")
