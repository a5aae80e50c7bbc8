"""
Catalog ETL Module
"""
from .accumulator import ProductAccumulator
from .normalizer import PriceHint, infer_hint, normalize_record, rows_from_csv
from .pipeline import CatalogETL, ETLResult, run_etl
from .sources import CsvSource, discover_csv_sources

__all__ = [
    "ProductAccumulator",
    "PriceHint",
    "infer_hint",
    "normalize_record",
    "rows_from_csv",
    "CatalogETL",
    "ETLResult",
    "run_etl",
    "CsvSource",
    "discover_csv_sources",
]
