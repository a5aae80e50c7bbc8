"""
Product Accumulator

Merges normalized rows from many snapshot files into one price series per
SKU. Metadata only ever improves; a later row for an already-seen date
replaces that date's price.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import structlog

from pricewatch.models import (
    PLACEHOLDER_VALUES,
    FinalizedProduct,
    NormalizedRow,
    PriceEntry,
    ProductMeta,
)

logger = structlog.get_logger(__name__)


def is_meaningful(value: Optional[str]) -> bool:
    return bool(value) and value not in PLACEHOLDER_VALUES


def prefer_meta_value(current: str, incoming: str) -> str:
    """
    Pick the more informative of two metadata values.

    Longer wins among meaningful values. Equal-length values keep the
    current one.
    """
    if not is_meaningful(current) and is_meaningful(incoming):
        return incoming
    if is_meaningful(incoming) and len(incoming) > len(current):
        return incoming
    return current


def prefer_url(current: Optional[str], incoming: Optional[str]) -> Optional[str]:
    cur = (current or "").strip()
    inc = (incoming or "").strip()
    if len(inc) > len(cur):
        return inc
    return cur or None


def merge_sold(current: Optional[int], incoming: Optional[int]) -> Optional[int]:
    if incoming is not None and incoming >= 0:
        if current is not None and current >= 0:
            return max(current, incoming)
        return incoming
    return current


def _price_entry_key(entry: PriceEntry):
    # Dated entries first, by date; undated entries by first-seen order
    if entry.yyyymmdd:
        return (0, int(entry.yyyymmdd), entry.order)
    return (1, 0, entry.order)


@dataclass
class ProductAggregate:
    """Metadata and raw price observations for one SKU"""
    meta: ProductMeta
    prices: List[PriceEntry] = field(default_factory=list)


class ProductAccumulator:
    """
    Run-scoped accumulator of per-SKU price observations.

    Example:
        acc = ProductAccumulator()
        for row in rows:
            acc.add_row(row)
        products = acc.finalize()
    """

    def __init__(self):
        self.products: Dict[str, ProductAggregate] = {}
        self.sequence = 0

    def __len__(self) -> int:
        return len(self.products)

    def _next_order(self) -> int:
        order = self.sequence
        self.sequence += 1
        return order

    def _merge_meta(self, meta: ProductMeta, row: NormalizedRow) -> None:
        meta.name = prefer_meta_value(meta.name, row.name)
        meta.brand = prefer_meta_value(meta.brand, row.brand)
        meta.category = prefer_meta_value(meta.category, row.category)
        meta.marketplace = prefer_meta_value(meta.marketplace, row.marketplace)
        meta.url = prefer_url(meta.url, row.url)
        meta.sold = merge_sold(meta.sold, row.sold)

    def add_row(self, row: NormalizedRow) -> None:
        """Merge one normalized row into its SKU's aggregate"""
        aggregate = self.products.get(row.sku)

        if aggregate is None:
            self.products[row.sku] = ProductAggregate(
                meta=ProductMeta.from_row(row),
                prices=[PriceEntry(row.price, row.yyyymmdd, self._next_order())],
            )
            return

        self._merge_meta(aggregate.meta, row)

        if row.yyyymmdd:
            for entry in aggregate.prices:
                if entry.yyyymmdd == row.yyyymmdd:
                    entry.value = row.price
                    return

        aggregate.prices.append(PriceEntry(row.price, row.yyyymmdd, self._next_order()))

    def add_rows(self, rows: List[NormalizedRow]) -> None:
        for row in rows:
            self.add_row(row)

    def finalize(self) -> List[FinalizedProduct]:
        """
        Produce one FinalizedProduct per SKU with at least one price.

        Returns:
            Products in first-seen order, each with a chronologically
            sorted price series
        """
        finalized = []
        for aggregate in self.products.values():
            if not aggregate.prices:
                continue
            ordered = sorted(aggregate.prices, key=_price_entry_key)
            finalized.append(
                FinalizedProduct(
                    meta=aggregate.meta,
                    price_series=[entry.value for entry in ordered],
                )
            )

        logger.debug("Accumulator finalized", products=len(finalized), observations=self.sequence)
        return finalized
