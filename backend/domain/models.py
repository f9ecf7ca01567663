"""
Core domain models for the book catalog.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict
import secrets

MANUAL_ENTRY_SOURCE = "manual entry"

# nanoid-compatible alphabet and length
WORK_ID_ALPHABET = "_-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
WORK_ID_LENGTH = 21


def _str_field(data: Dict[str, Any], name: str) -> str:
    """Return a string field, "" when absent; any other type is an error."""
    value = data.get(name, "")
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value


def generate_work_id() -> str:
    """Return a fresh 21-character URL-safe identifier."""
    return "".join(secrets.choice(WORK_ID_ALPHABET) for _ in range(WORK_ID_LENGTH))


@dataclass
class Work:
    """
    A single catalog entry describing one book.

    Works are either entered manually (fresh id, ``source="manual entry"``)
    or carried over from an import, in which case the external id is kept
    and ``from_import`` is set. ``source`` and ``from_import`` never change
    after creation.
    """
    id: str
    author: str = ""
    title: str = ""
    isbn: str = ""
    source: str = MANUAL_ENTRY_SOURCE
    from_import: bool = False

    @classmethod
    def new_manual(cls, author: str, title: str, isbn: str) -> "Work":
        return cls(
            id=generate_work_id(),
            author=author,
            title=title,
            isbn=isbn,
            source=MANUAL_ENTRY_SOURCE,
            from_import=False,
        )

    def with_fields(self, author: str, title: str, isbn: str) -> "Work":
        """Copy with the editable fields replaced."""
        return Work(
            id=self.id,
            author=author,
            title=title,
            isbn=isbn,
            source=self.source,
            from_import=self.from_import,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Work":
        """
        Build a work from its persisted form.

        Raises:
            ValueError: a field is present with the wrong type.
        """
        work_id = data.get("id")
        if not isinstance(work_id, str) or not work_id:
            raise ValueError(f"work id must be a non-empty string, got {work_id!r}")
        # Older catalog files wrote the import flag as "FromImport"
        from_import = data.get("from_import", data.get("FromImport", False))
        if not isinstance(from_import, bool):
            raise ValueError(f"work {work_id}: from_import must be a boolean, got {from_import!r}")
        return cls(
            id=work_id,
            author=_str_field(data, "author"),
            title=_str_field(data, "title"),
            isbn=_str_field(data, "isbn"),
            source=_str_field(data, "source"),
            from_import=from_import,
        )


@dataclass
class ImportedWork:
    """A record in the external import format (e.g. a LibraryThing export)."""
    books_id: str
    primaryauthor: str = ""
    title: str = ""
    originalisbn: str = ""
    source: str = ""

    def to_work(self, default_source: str) -> Work:
        return Work(
            id=self.books_id,
            author=self.primaryauthor,
            title=self.title,
            isbn=self.originalisbn,
            source=self.source or default_source,
            from_import=True,
        )
