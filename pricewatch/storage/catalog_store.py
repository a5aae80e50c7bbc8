"""
Catalog Store

Reads and writes the processed catalog document ``{"items": [...]}``.

Loading order:
1. Local file (skipped when the cached snapshot has the same mtime)
2. The last cached snapshot
3. Remote products.json over HTTP
4. Empty catalog

Writes replace the whole document atomically.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union

import httpx
import structlog
from pydantic import ValidationError

from pricewatch.exceptions import StorageError
from pricewatch.models import CatalogPayload, EnrichedProductRecord
from pricewatch.storage.cache import CatalogCache

logger = structlog.get_logger(__name__)


def atomic_write_json(path: Union[str, Path], payload: Any) -> None:
    """
    Write JSON to ``path`` through a temp file and rename.

    Raises:
        StorageError: the write failed; the previous file is left untouched
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except (OSError, TypeError, ValueError) as e:
        raise StorageError(f"Failed to write {path}: {e}", {"path": str(path)}) from e


def parse_catalog(raw: str) -> Optional[List[EnrichedProductRecord]]:
    """
    Parse a catalog document.

    Returns:
        Parsed items (invalid items are skipped), or None when the document
        is not JSON or has no ``items`` list
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict) or not isinstance(parsed.get("items"), list):
        return None

    items = []
    skipped = 0
    for entry in parsed["items"]:
        try:
            items.append(EnrichedProductRecord.model_validate(entry))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped invalid catalog items", skipped=skipped)
    return items


class CatalogStore:
    """
    File-backed catalog store with an injected snapshot cache.

    Example:
        store = CatalogStore("data/processed/products.json", cache=CatalogCache())
        store.save(records)
        items = store.load()
    """

    def __init__(
        self,
        path: Union[str, Path],
        cache: Optional[CatalogCache] = None,
        remote_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.path = Path(path)
        self.cache = cache if cache is not None else CatalogCache()
        self.remote_url = remote_url
        self.http_client = http_client
        self.timeout = timeout

    def _load_local(self) -> Optional[List[EnrichedProductRecord]]:
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return None

        if self.cache.is_fresh(mtime):
            return self.cache.snapshot

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to read local catalog", path=str(self.path), error=str(e))
            return None

        items = parse_catalog(raw)
        if items is None:
            logger.warning("Local catalog is not a valid document", path=str(self.path))
            return None

        self.cache.update(items, fingerprint=mtime)
        return items

    def _load_remote(self) -> Optional[List[EnrichedProductRecord]]:
        if not self.remote_url:
            return None
        try:
            if self.http_client is not None:
                response = self.http_client.get(self.remote_url)
            else:
                response = httpx.get(self.remote_url, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Remote catalog fetch failed", url=self.remote_url, error=str(e))
            return None
        return parse_catalog(response.text)

    def load(self) -> List[EnrichedProductRecord]:
        """Load the catalog following local → cache → remote → empty"""
        local = self._load_local()
        if local is not None:
            return local

        if self.cache.has_snapshot:
            return self.cache.snapshot

        remote = self._load_remote()
        if remote is not None:
            self.cache.update(remote)
            return remote

        return []

    def save(self, items: List[EnrichedProductRecord]) -> None:
        """Replace the whole catalog document"""
        payload = CatalogPayload(items=items).to_json_dict()
        atomic_write_json(self.path, payload)
        self.cache.invalidate()
        logger.info("Catalog saved", path=str(self.path), items=len(items))
