"""
Search Module
"""
from .pipeline import (
    PriceBand,
    SearchFilters,
    SearchPage,
    SortMode,
    TokenMatch,
    TrendFilter,
    merge_manual_records,
    search,
    tokenize_query,
)
from .ranking import rank_products, score_query
from .service import SearchService

__all__ = [
    "PriceBand",
    "SearchFilters",
    "SearchPage",
    "SortMode",
    "TokenMatch",
    "TrendFilter",
    "merge_manual_records",
    "search",
    "tokenize_query",
    "rank_products",
    "score_query",
    "SearchService",
]
