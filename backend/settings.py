import os
from pathlib import Path

# Basic settings helper to read environment configuration.

DATA_DIR = Path(__file__).resolve().parent / "data"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self) -> None:
        self.CATALOG_BACKEND: str = os.getenv("CATALOG_BACKEND", "json").lower()
        self.CATALOG_PATH: Path = Path(os.getenv("CATALOG_PATH", str(DATA_DIR / "catalog.json")))
        self.CATALOG_DATABASE_URL: str = os.getenv(
            "CATALOG_DATABASE_URL", f"sqlite:///{DATA_DIR / 'works.db'}"
        )
        self.IMPORT_ON_START: bool = _as_bool(os.getenv("IMPORT_ON_START"), False)
        self.IMPORT_PATH: Path = Path(os.getenv("IMPORT_PATH", str(DATA_DIR / "import.json")))
        self.OPENLIBRARY_SEARCH_URL: str = os.getenv(
            "OPENLIBRARY_SEARCH_URL", "https://openlibrary.org/search.json"
        )
        self.SEARCH_TIMEOUT_SECONDS: float = float(os.getenv("SEARCH_TIMEOUT_SECONDS", "10"))

    @classmethod
    def from_env(cls) -> "Settings":
        """Re-read the environment (the module-level instance is built once at import)."""
        return cls()


settings = Settings()
