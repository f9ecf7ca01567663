"""
File storage for the flat-file catalog.

Provides a simple interface for reading and writing the whole catalog
document. Currently uses the local filesystem.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class CatalogFile:
    """
    Local file holding the serialized catalog.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so a concurrent reader sees either the old or
    the new document and never a partial one.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read_bytes(self) -> Optional[bytes]:
        """
        Read the catalog document.

        Returns:
            The raw document, or None when no catalog has been written yet.

        Raises:
            StoreUnavailable: the file exists but cannot be read.
        """
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Error reading catalog %s: %s", self.path, e)
            raise StoreUnavailable(f"Cannot read catalog file {self.path}: {e}") from e

    def write_bytes(self, data: bytes) -> None:
        """
        Atomically replace the catalog document.

        Raises:
            StoreUnavailable: the document could not be written; the previous
                file is left untouched.
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.warning("Error saving catalog %s: %s", self.path, e)
            raise StoreUnavailable(f"Cannot write catalog file {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
