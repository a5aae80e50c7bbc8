"""
Dependency injection for FastAPI routes.
"""

from dataclasses import dataclass

from fastapi import Request

from pricewatch.config import Settings
from pricewatch.search.service import SearchService
from pricewatch.storage import CatalogCache, CatalogStore, ManualStore


@dataclass
class AppState:
    """Shared application state, attached to app.state at creation"""
    settings: Settings
    cache: CatalogCache
    catalog: CatalogStore
    manual: ManualStore
    search: SearchService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppState":
        cache = CatalogCache()
        catalog = CatalogStore(
            settings.catalog.processed_path,
            cache=cache,
            remote_url=settings.catalog.remote_url,
            timeout=settings.catalog.request_timeout,
        )
        manual = ManualStore(settings.catalog.manual_dir)
        return cls(
            settings=settings,
            cache=cache,
            catalog=catalog,
            manual=manual,
            search=SearchService(catalog, manual, settings),
        )


def get_app_state(request: Request) -> AppState:
    return request.app.state.app_state


def get_manual_store(request: Request) -> ManualStore:
    return request.app.state.app_state.manual


def get_search_service(request: Request) -> SearchService:
    return request.app.state.app_state.search
