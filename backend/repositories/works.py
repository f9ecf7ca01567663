"""
Work repository backed by SQLAlchemy/SQLite.
"""
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from domain.models import Work
from repositories.models import WorkORM


def _work_from_orm(orm: WorkORM) -> Work:
    return Work(
        id=orm.id,
        author=orm.author or "",
        title=orm.title or "",
        isbn=orm.isbn or "",
        source=orm.source or "",
        from_import=bool(orm.from_import),
    )


def _update_orm_from_work(orm: WorkORM, work: Work) -> None:
    orm.author = work.author
    orm.title = work.title
    orm.isbn = work.isbn
    orm.source = work.source
    orm.from_import = work.from_import


class WorksRepository:
    """CRUD operations for works."""

    def list_works(self, session: Session) -> List[Work]:
        works = session.query(WorkORM).all()
        return [_work_from_orm(w) for w in works]

    def get_work(self, session: Session, work_id: str) -> Optional[Work]:
        orm = session.get(WorkORM, work_id)
        if not orm:
            return None
        return _work_from_orm(orm)

    def create_work(self, session: Session, work: Work) -> Work:
        orm = WorkORM(id=work.id)
        _update_orm_from_work(orm, work)
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _work_from_orm(orm)

    def update_fields(
        self, session: Session, work_id: str, author: str, title: str, isbn: str
    ) -> Optional[Work]:
        orm = session.get(WorkORM, work_id)
        if not orm:
            return None
        # source and from_import are left as created
        orm.author = author
        orm.title = title
        orm.isbn = isbn
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _work_from_orm(orm)

    def delete_work(self, session: Session, work_id: str) -> bool:
        orm = session.get(WorkORM, work_id)
        if not orm:
            return False
        session.delete(orm)
        session.commit()
        return True

    def upsert_works(self, session: Session, works: Iterable[Work]) -> int:
        """Insert or fully overwrite each work by id, in a single commit."""
        count = 0
        for work in works:
            orm = session.get(WorkORM, work.id)
            if orm is None:
                orm = WorkORM(id=work.id)
            _update_orm_from_work(orm, work)
            session.add(orm)
            count += 1
        session.commit()
        return count
