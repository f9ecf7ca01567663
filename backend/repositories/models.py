"""
SQLAlchemy ORM models for persistence.
"""
from sqlalchemy import Boolean, Column, String

from db import Base


class WorkORM(Base):
    __tablename__ = "works"

    id = Column(String, primary_key=True, index=True)
    author = Column(String, nullable=False, default="")
    title = Column(String, nullable=False, default="")
    isbn = Column(String, nullable=False, default="")
    source = Column(String, nullable=False, default="")
    from_import = Column(Boolean, nullable=False, default=False)
