"""
API Routes Module
"""
from .health import router as health_router
from .search import router as search_router
from .etl import router as etl_router
from .manual import router as manual_router

__all__ = [
    "health_router",
    "search_router",
    "etl_router",
    "manual_router",
]
