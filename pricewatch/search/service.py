"""
Search Service

Binds the search pipeline to the catalog and manual stores.
"""

from typing import List, Optional

import structlog

from pricewatch.config import Settings, get_settings
from pricewatch.models import EnrichedProductRecord
from pricewatch.search.pipeline import (
    SearchFilters,
    SearchPage,
    TokenMatch,
    merge_manual_records,
    search,
)
from pricewatch.storage.catalog_store import CatalogStore
from pricewatch.storage.manual_store import ManualStore

logger = structlog.get_logger(__name__)


class SearchService:
    """
    Read-only search over the current catalog snapshot.

    Example:
        service = SearchService(catalog_store, manual_store)
        page = service.search("asus vivobook", SearchFilters.parse(sort="price-asc"))
    """

    def __init__(
        self,
        catalog: CatalogStore,
        manual: Optional[ManualStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.catalog = catalog
        self.manual = manual
        self.settings = settings or get_settings()

    def corpus(self) -> List[EnrichedProductRecord]:
        """Catalog items merged with manual submissions and corrections"""
        items = self.catalog.load()
        if self.manual is None:
            return items
        return merge_manual_records(
            items,
            self.manual.list_submissions(),
            self.manual.list_feedback(),
        )

    def search(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        page: int = 1,
    ) -> SearchPage:
        search_settings = self.settings.search
        if not (query or "").strip():
            return SearchPage(page_size=search_settings.page_size)

        return search(
            self.corpus(),
            query,
            filters,
            page=page,
            page_size=search_settings.page_size,
            max_tokens=search_settings.max_tokens,
            token_match=TokenMatch(search_settings.token_match),
        )
