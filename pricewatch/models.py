"""
Catalog Data Models

Row-level and product-level records flowing through the ETL pipeline, the
externalized product record consumed by search, and the manually submitted
records merged into the search corpus.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


PLACEHOLDER_VALUES = {"", "Unknown", "-"}


# =============================================================================
# ETL RECORDS
# =============================================================================

@dataclass(frozen=True)
class NormalizedRow:
    """One canonical CSV row"""
    sku: str
    name: str
    brand: str
    category: str
    marketplace: str
    price: int
    yyyymmdd: Optional[str] = None
    url: Optional[str] = None
    sold: Optional[int] = None


@dataclass
class ProductMeta:
    """Descriptive fields for one SKU, improved as more rows are merged"""
    sku: str
    name: str
    brand: str
    category: str
    marketplace: str
    url: Optional[str] = None
    sold: Optional[int] = None

    @classmethod
    def from_row(cls, row: NormalizedRow) -> "ProductMeta":
        return cls(
            sku=row.sku,
            name=row.name,
            brand=row.brand,
            category=row.category,
            marketplace=row.marketplace,
            url=row.url,
            sold=row.sold,
        )


@dataclass
class PriceEntry:
    """A single observed price"""
    value: int
    yyyymmdd: Optional[str]
    order: int


@dataclass
class FinalizedProduct:
    """A product with its chronologically ordered price series"""
    meta: ProductMeta
    price_series: List[int] = field(default_factory=list)

    @property
    def latest_price(self) -> int:
        return self.price_series[-1]


# =============================================================================
# EXTERNALIZED RECORDS
# =============================================================================

class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class EnrichedProductRecord(CamelModel):
    """Catalog item persisted to products.json and served by search"""
    sku: str
    name: str
    brand: str = "Unknown"
    category: str = "Laptop"
    marketplace: str = ""
    url: Optional[str] = None
    sold: Optional[int] = None
    price: Optional[int] = None
    price_history: List[int] = Field(default_factory=list)
    trend: str = "flat"
    forecast7: List[float] = Field(default_factory=list)
    price_change_pct: float = 0.0
    direction: str = "flat"
    accuracy: Optional[float] = None
    is_on_sale: bool = False
    source: str = "etl"

    @field_validator("trend", "direction", mode="before")
    @classmethod
    def normalize_label(cls, v: Optional[str]) -> str:
        if not v:
            return "flat"
        v = str(v).lower()
        return v if v in ("up", "down", "flat") else "flat"

    @property
    def searchable_text(self) -> str:
        return f"{self.name} {self.brand} {self.category} {self.marketplace} {self.sku}".lower()


class CatalogPayload(CamelModel):
    """Whole-collection document: {"items": [...]}"""
    items: List[EnrichedProductRecord] = Field(default_factory=list)


def _entry_id(kind: str) -> str:
    return f"{kind}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ManualSubmission(CamelModel):
    """A product submitted by hand"""
    id: str = Field(default_factory=lambda: _entry_id("submission"))
    timestamp: datetime = Field(default_factory=_utcnow)
    name: str
    brand: str
    category: str = "Laptop"
    marketplace: str
    url: Optional[str] = None
    price: int = Field(gt=0)
    sold: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", "brand", "marketplace")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        return v or "Laptop"

    @field_validator("url", mode="before")
    @classmethod
    def blank_url(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None


class PriceFeedback(CamelModel):
    """A manual price correction for an existing SKU"""
    id: str = Field(default_factory=lambda: _entry_id("feedback"))
    timestamp: datetime = Field(default_factory=_utcnow)
    sku: str
    new_price: int = Field(gt=0)
    previous_price: Optional[int] = None
    product_name: Optional[str] = None
    marketplace: Optional[str] = None
    url: Optional[str] = None
    note: Optional[str] = None

    @field_validator("sku")
    @classmethod
    def require_sku(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("product_name", "marketplace", "url", "note", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None
