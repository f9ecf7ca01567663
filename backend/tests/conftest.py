import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.catalog_store import JsonCatalogStore, SqlCatalogStore  # noqa: E402


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    """Empty catalog store, once per backing."""
    if request.param == "json":
        yield JsonCatalogStore(tmp_path / "catalog.json")
        return
    sql_store = SqlCatalogStore.from_url(f"sqlite:///{tmp_path / 'works.db'}")
    yield sql_store
    sql_store.engine.dispose()
