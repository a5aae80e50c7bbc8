"""
ETL API Endpoint

Rebuilds the processed catalog from the raw CSV tree.
"""

from fastapi import APIRouter, Depends, HTTPException
import structlog

from pricewatch.etl.pipeline import CatalogETL
from pricewatch.etl.sources import discover_csv_sources
from pricewatch.exceptions import StorageError
from pricewatch.models import CamelModel
from pricewatch.serving.api.deps import AppState, get_app_state

logger = structlog.get_logger(__name__)
router = APIRouter()


class ETLResponse(CamelModel):
    """ETL run summary"""
    ok: bool
    count: int
    files_processed: int
    files_failed: int
    duration_seconds: float


@router.post("/etl", response_model=ETLResponse)
def run_catalog_etl(state: AppState = Depends(get_app_state)) -> ETLResponse:
    """Process every CSV under the raw tree and replace the catalog."""
    raw_dir = state.settings.catalog.raw_dir
    sources = discover_csv_sources(raw_dir)
    if not sources:
        raise HTTPException(status_code=404, detail=f"No CSV files under {raw_dir}/**/laptop/")

    result = CatalogETL(state.settings).run(sources)

    try:
        state.catalog.save(result.records)
    except StorageError as e:
        logger.error("Catalog save failed", error=str(e), **e.context)
        raise HTTPException(status_code=500, detail="Failed to persist catalog")

    return ETLResponse(
        ok=True,
        count=len(result.records),
        files_processed=result.files_processed,
        files_failed=result.files_failed,
        duration_seconds=round(result.duration_seconds, 3),
    )
