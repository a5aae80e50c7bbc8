"""
Catalog Snapshot Cache

Holds the last-loaded catalog together with the fingerprint of the file it
came from. One instance lives on the application state (or per test) and
is passed to the stores that use it.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from pricewatch.models import EnrichedProductRecord

logger = structlog.get_logger(__name__)


class CatalogCache:
    """
    In-process cache of the catalog snapshot.

    Invalidation is advisory: a changed fingerprint forces a reload, but
    nothing prevents a reader from seeing a snapshot that was replaced on
    disk a moment later.

    Example:
        cache = CatalogCache()
        if not cache.is_fresh(mtime):
            cache.update(items, fingerprint=mtime)
    """

    def __init__(self):
        self.snapshot: Optional[List[EnrichedProductRecord]] = None
        self.fingerprint: Optional[float] = None
        self.loaded_at: Optional[datetime] = None

    @property
    def has_snapshot(self) -> bool:
        return self.snapshot is not None

    def is_fresh(self, fingerprint: Optional[float]) -> bool:
        """True when the cached snapshot came from a source with this fingerprint"""
        return (
            self.snapshot is not None
            and fingerprint is not None
            and self.fingerprint == fingerprint
        )

    def update(
        self,
        items: List[EnrichedProductRecord],
        fingerprint: Optional[float] = None,
    ) -> None:
        self.snapshot = items
        self.fingerprint = fingerprint
        self.loaded_at = datetime.now(timezone.utc)
        logger.debug("Catalog cache updated", items=len(items), fingerprint=fingerprint)

    def invalidate(self) -> None:
        self.snapshot = None
        self.fingerprint = None
        self.loaded_at = None
