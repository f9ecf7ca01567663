"""Offline catalog maintenance: import a batch or export a snapshot.

Usage (from backend/):
    python -m scripts.catalog_cli import [--import-file PATH]
    python -m scripts.catalog_cli export [--output PATH]

Backing selection and default paths come from the same environment
variables the API uses (CATALOG_BACKEND, CATALOG_PATH, ...).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from domain.errors import CatalogError
from services.catalog import CatalogService
from services.catalog_store import build_catalog_store
from settings import Settings

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import into or export the book catalog.")
    sub = parser.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Merge an import document into the catalog.")
    imp.add_argument("--import-file", default=str(settings.IMPORT_PATH), help="Import JSON document.")

    exp = sub.add_parser("export", help="Write the catalog snapshot.")
    exp.add_argument("--output", default=None, help="Output file (defaults to stdout).")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    settings = Settings.from_env()
    args = build_parser(settings).parse_args(argv)

    try:
        catalog = CatalogService(build_catalog_store(settings))
        if args.command == "import":
            merged = catalog.import_batch(Path(args.import_file))
            logger.info("Merged %d works from %s", merged, args.import_file)
        else:
            snapshot = catalog.export_snapshot()
            if args.output:
                Path(args.output).write_bytes(snapshot)
                logger.info("Wrote catalog snapshot to %s", args.output)
            else:
                sys.stdout.buffer.write(snapshot)
    except CatalogError as e:
        logger.error("%s: %s", e.code, e.message)
        return 1
    except OSError as e:
        logger.error("Cannot write %s: %s", args.output, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
