"""
Prefect Workflow Orchestration - Catalog ETL

Scheduled rebuild of the processed laptop catalog:
- Discover raw CSV snapshots
- Normalize, merge and forecast
- Replace the processed catalog document
"""

from typing import Optional

from prefect import flow, task, get_run_logger

from pricewatch.config import get_settings
from pricewatch.etl.pipeline import CatalogETL, ETLResult
from pricewatch.etl.sources import CsvSource, discover_csv_sources
from pricewatch.storage import CatalogStore

settings = get_settings()


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="discover_sources",
    description="Find raw CSV snapshots under the laptop tree",
)
def discover_sources(raw_dir: str) -> list[str]:
    logger = get_run_logger()
    paths = [source.key for source in discover_csv_sources(raw_dir)]
    logger.info(f"Found {len(paths)} CSV files under {raw_dir}")
    return paths


@task(
    name="transform_catalog",
    description="Normalize, merge and forecast the snapshots",
)
def transform_catalog(paths: list[str]) -> ETLResult:
    logger = get_run_logger()
    result = CatalogETL(settings).run(CsvSource.from_path(p) for p in paths)
    logger.info(
        f"Transformation complete: {result.files_processed}/{result.files_total} files, "
        f"{result.rows_loaded} rows -> {len(result.records)} products"
    )
    return result


@task(
    name="persist_catalog",
    description="Replace the processed catalog document",
    retries=2,
    retry_delay_seconds=30,
)
def persist_catalog(result: ETLResult, processed_path: str) -> int:
    CatalogStore(processed_path).save(result.records)
    return len(result.records)


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="catalog_etl",
    description="Rebuild the laptop price catalog from raw CSV snapshots",
)
def catalog_etl(
    raw_dir: Optional[str] = None,
    processed_path: Optional[str] = None,
) -> dict:
    """
    Catalog ETL pipeline.

    Steps:
    1. Discover CSV files
    2. Transform into enriched products
    3. Persist the catalog
    """
    logger = get_run_logger()

    raw_dir = raw_dir or settings.catalog.raw_dir
    processed_path = processed_path or settings.catalog.processed_path

    paths = discover_sources(raw_dir)
    if not paths:
        logger.warning(f"No CSV files found under {raw_dir}; catalog left unchanged")
        return {"status": "skipped", "count": 0}

    result = transform_catalog(paths)
    count = persist_catalog(result, processed_path)

    return {
        "status": "success",
        "count": count,
        "files_processed": result.files_processed,
        "files_failed": result.files_failed,
    }


if __name__ == "__main__":
    catalog_etl()
