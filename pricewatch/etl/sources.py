"""
CSV Sources

A CsvSource pairs a storage key (used for path hints) with a reader that
produces the file's text. Readers may hit the local disk or the network.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

import httpx
import structlog

from pricewatch.etl.normalizer import PriceHint, infer_hint, infer_hint_from_blob_key
from pricewatch.exceptions import SourceReadError

logger = structlog.get_logger(__name__)


@dataclass
class CsvSource:
    """One raw CSV snapshot tagged with its path or key"""
    key: str
    reader: Callable[[], str]
    blob_prefix: Optional[str] = None

    @classmethod
    def from_text(cls, key: str, text: str) -> "CsvSource":
        return cls(key=key, reader=lambda: text)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CsvSource":
        path = Path(path)
        return cls(key=str(path), reader=lambda: path.read_text(encoding="utf-8"))

    @classmethod
    def from_url(
        cls,
        key: str,
        url: str,
        client: httpx.Client,
        blob_prefix: Optional[str] = None,
    ) -> "CsvSource":
        def read() -> str:
            response = client.get(url)
            response.raise_for_status()
            return response.text

        return cls(key=key, reader=read, blob_prefix=blob_prefix)

    def hint(self) -> PriceHint:
        if self.blob_prefix:
            return infer_hint_from_blob_key(self.key, self.blob_prefix)
        return infer_hint(self.key)

    def read(self) -> str:
        """Return the file text, wrapping I/O failures in SourceReadError"""
        try:
            return self.reader()
        except (OSError, UnicodeDecodeError, httpx.HTTPError) as e:
            raise SourceReadError(f"Failed to read {self.key}: {e}", {"key": self.key}) from e


def is_laptop_csv(path: Union[str, Path]) -> bool:
    path = Path(path)
    return path.suffix.lower() == ".csv" and "laptop" in (p.lower() for p in path.parts)


def discover_csv_sources(root: Union[str, Path]) -> List[CsvSource]:
    """
    Find every ``*.csv`` below ``root`` that sits under a ``laptop`` folder.

    Returns:
        Sources ordered by the snapshot date inferred from the path, then by
        path, so later snapshots are processed last. Files without a date
        come first.
    """
    root = Path(root)
    if not root.exists():
        logger.warning("CSV root does not exist", root=str(root))
        return []

    paths = sorted(
        (p for p in root.rglob("*") if p.is_file() and is_laptop_csv(p)),
        key=lambda p: (infer_hint(str(p)).yyyymmdd or "", str(p)),
    )
    logger.info("Discovered CSV sources", root=str(root), count=len(paths))
    return [CsvSource.from_path(p) for p in paths]
