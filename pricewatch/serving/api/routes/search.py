"""
Search API Endpoint

Ranked, filtered and paginated product search.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from pricewatch.search.pipeline import SearchFilters, SearchPage
from pricewatch.search.service import SearchService
from pricewatch.serving.api.deps import get_search_service

router = APIRouter()


def _page_number(raw: Optional[str]) -> int:
    try:
        page = int(raw or "1")
    except ValueError:
        return 1
    return page if page > 0 else 1


@router.get("/search")
def search_products(
    q: str = Query("", description="Free-text query"),
    trend: str = Query("all", description="up, down, flat or all"),
    price: str = Query("all", description="lt-5000k, 5000-10000k, gt-10000k or all"),
    sort: str = Query("relevance", description="relevance, price-asc, price-desc or sold-desc"),
    page: Optional[str] = Query("1", description="1-based page number"),
    service: SearchService = Depends(get_search_service),
) -> dict:
    """
    Search the catalog.

    Malformed filter values and page numbers fall back to defaults.
    """
    filters = SearchFilters.parse(trend=trend, price_band=price, sort=sort)
    result: SearchPage = service.search(q, filters, page=_page_number(page))
    return result.to_json_dict()
