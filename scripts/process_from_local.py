"""
Local Catalog Builder

Processes ``data/raw/laptop/<Month Year>/<Marketplace>/<Brand>/*.csv`` into
the processed catalog JSON.

Usage:
    python scripts/process_from_local.py
    python scripts/process_from_local.py --raw-dir data/raw --output public/processed/products.json
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pricewatch.config import get_settings
from pricewatch.config.logging import configure_logging
from pricewatch.etl.pipeline import CatalogETL
from pricewatch.etl.sources import discover_csv_sources
from pricewatch.exceptions import StorageError
from pricewatch.storage import CatalogStore


def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Build the laptop catalog from local CSV snapshots")
    parser.add_argument("--raw-dir", default=settings.catalog.raw_dir, help="Root of the raw CSV tree")
    parser.add_argument("--output", default=settings.catalog.processed_path, help="Catalog JSON path")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    args = parser.parse_args()

    configure_logging(args.log_level, settings=settings)

    raw_dir = Path(args.raw_dir)
    if not raw_dir.exists():
        print(f"❌ {raw_dir} not found. Layout: {raw_dir}/laptop/<Month Year>/<Marketplace>/<Brand>/*.csv")
        return 1

    sources = discover_csv_sources(raw_dir)
    result = CatalogETL(settings).run(sources)

    try:
        CatalogStore(args.output).save(result.records)
    except StorageError as e:
        print(f"❌ {e}")
        return 1

    print(f"✅ Saved {args.output} with {len(result.records)} products")
    print(f"   📄 {result.files_processed}/{result.files_total} files processed, {result.files_failed} skipped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
