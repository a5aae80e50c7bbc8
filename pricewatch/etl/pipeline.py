"""
Catalog ETL Pipeline

Drives CSV snapshots through normalization, per-SKU accumulation and
forecast enrichment, producing the flat product collection served by
search.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import structlog

from pricewatch.config import Settings, get_settings
from pricewatch.etl.accumulator import ProductAccumulator
from pricewatch.etl.normalizer import rows_from_csv
from pricewatch.etl.sources import CsvSource
from pricewatch.exceptions import CsvParseError, SourceReadError
from pricewatch.forecasting.forecast import enrich_product
from pricewatch.models import EnrichedProductRecord

logger = structlog.get_logger(__name__)


@dataclass
class ETLResult:
    """Result of one ETL run"""
    records: List[EnrichedProductRecord]
    files_total: int
    files_processed: int
    files_failed: int
    rows_loaded: int
    started_at: datetime
    completed_at: datetime
    errors: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


class CatalogETL:
    """
    ETL orchestrator for laptop price snapshots.

    Files are processed sequentially. A file that cannot be read or parsed
    is logged and skipped; the rest of the batch continues.

    Example:
        etl = CatalogETL()
        result = etl.run(discover_csv_sources("data/raw"))
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _load_source(self, source: CsvSource, accumulator: ProductAccumulator) -> int:
        text = source.read()
        try:
            rows = rows_from_csv(text, source.hint())
        except CsvParseError as e:
            e.context.setdefault("key", source.key)
            raise
        accumulator.add_rows(rows)
        return len(rows)

    def run(self, sources: Iterable[CsvSource]) -> ETLResult:
        """
        Run the full pipeline over the given sources.

        Pipeline:
        1. Read and normalize each CSV
        2. Merge rows into per-SKU price series
        3. Finalize series and enrich with forecasts
        """
        started_at = datetime.now(timezone.utc)
        accumulator = ProductAccumulator()
        sources = list(sources)
        processed = 0
        rows_loaded = 0
        errors = []

        logger.info("Starting catalog ETL", files=len(sources))

        for source in sources:
            try:
                rows_loaded += self._load_source(source, accumulator)
                processed += 1
            except (SourceReadError, CsvParseError) as e:
                logger.error("Skipping CSV source", key=source.key, error=str(e))
                errors.append(str(e))

        forecast_settings = self.settings.forecast
        records = [
            enrich_product(
                product,
                horizon=forecast_settings.horizon,
                alpha=forecast_settings.alpha,
                clamp=forecast_settings.clamp_to_last_actual,
            )
            for product in accumulator.finalize()
        ]

        completed_at = datetime.now(timezone.utc)
        result = ETLResult(
            records=records,
            files_total=len(sources),
            files_processed=processed,
            files_failed=len(errors),
            rows_loaded=rows_loaded,
            started_at=started_at,
            completed_at=completed_at,
            errors=errors,
        )

        logger.info(
            "Catalog ETL complete",
            files_processed=processed,
            files_failed=len(errors),
            rows=rows_loaded,
            products=len(records),
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result


def run_etl(
    sources: Iterable[CsvSource],
    settings: Optional[Settings] = None,
) -> List[EnrichedProductRecord]:
    """
    Convenience function to run the ETL and return the enriched products.

    Args:
        sources: CSV snapshots to process
        settings: Optional settings override

    Returns:
        One enriched record per SKU with at least one price
    """
    return CatalogETL(settings).run(sources).records
