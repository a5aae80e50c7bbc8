"""
Search/Filter Pipeline

Query tokenization, candidate filtering, ranking, sorting and pagination
over the in-memory catalog. The pipeline never raises for odd query input;
unknown filter values fall back to "no filter".
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

import structlog
from pydantic import Field

from pricewatch.models import (
    CamelModel,
    EnrichedProductRecord,
    ManualSubmission,
    PriceFeedback,
)
from pricewatch.etl.normalizer import slugify
from pricewatch.forecasting.forecast import forecast_next7
from pricewatch.search.ranking import BRAND_KEYWORDS, condense, rank_products

logger = structlog.get_logger(__name__)


PAGE_SIZE = 24
MAX_TOKENS = 5

STOP_WORDS = frozenset([
    "with",
    "dan",
    "dengan",
    "yang",
    "and",
    "the",
    "atau",
    "ke",
    "di",
])

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class TrendFilter(str, Enum):
    """Trend label filter"""
    ALL = "all"
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class PriceBand(str, Enum):
    """Price band filter, in currency units"""
    ALL = "all"
    UNDER_5M = "lt-5000k"
    BETWEEN_5M_10M = "5000-10000k"
    OVER_10M = "gt-10000k"


class SortMode(str, Enum):
    """Result ordering"""
    RELEVANCE = "relevance"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    SOLD_DESC = "sold-desc"


class TokenMatch(str, Enum):
    """How query tokens must appear in a candidate"""
    ALL = "all"
    ANY = "any"


def _parse_enum(enum_cls, value: Optional[str], default):
    try:
        return enum_cls((value or "").strip().lower())
    except ValueError:
        return default


@dataclass
class SearchFilters:
    """Filters applied after token matching"""
    trend: TrendFilter = TrendFilter.ALL
    price_band: PriceBand = PriceBand.ALL
    sort: SortMode = SortMode.RELEVANCE

    @classmethod
    def parse(
        cls,
        trend: Optional[str] = None,
        price_band: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> "SearchFilters":
        """Build filters from raw strings; unknown values mean no filter"""
        return cls(
            trend=_parse_enum(TrendFilter, trend, TrendFilter.ALL),
            price_band=_parse_enum(PriceBand, price_band, PriceBand.ALL),
            sort=_parse_enum(SortMode, sort, SortMode.RELEVANCE),
        )


class SearchPage(CamelModel):
    """One page of search results"""
    items: List[EnrichedProductRecord] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_items: int = 0
    page_size: int = PAGE_SIZE


# =============================================================================
# TOKENIZATION
# =============================================================================

def _dedupe(tokens: Iterable[str], limit: int) -> List[str]:
    seen = []
    for token in tokens:
        if token and token not in seen:
            seen.append(token)
        if len(seen) >= limit:
            break
    return seen


def tokenize_query(query: str, max_tokens: int = MAX_TOKENS) -> List[str]:
    """
    Split a query into match tokens.

    Lowercases, strips non-alphanumerics, drops one-character tokens and
    stop-words. Falls back to the unfiltered tokens when nothing survives.
    """
    raw = [_NON_ALNUM.sub("", part) for part in query.lower().split()]
    strict = _dedupe(
        (t for t in raw if len(t) > 1 and t not in STOP_WORDS),
        max_tokens,
    )
    if strict:
        return strict
    return _dedupe(raw, max_tokens)


# =============================================================================
# FILTERS
# =============================================================================

def _matches_sku(item: EnrichedProductRecord, query: str) -> bool:
    condensed = condense(query)
    return bool(condensed) and condensed in condense(item.sku)


def filter_by_tokens(
    items: List[EnrichedProductRecord],
    tokens: List[str],
    query: str,
    token_match: TokenMatch = TokenMatch.ALL,
) -> List[EnrichedProductRecord]:
    """
    Keep items whose searchable text contains the query tokens.

    A hyphenated query also matches any item whose condensed SKU contains
    the condensed query. Brand keywords in the query must appear in the
    item's brand.
    """
    if not tokens:
        return items

    sku_lookup = "-" in query
    brand_tokens = [t for t in tokens if t in BRAND_KEYWORDS]
    matcher = all if token_match == TokenMatch.ALL else any

    results = []
    for item in items:
        if sku_lookup and _matches_sku(item, query):
            results.append(item)
            continue
        haystack = item.searchable_text
        if not matcher(token in haystack for token in tokens):
            continue
        if brand_tokens:
            brand = (item.brand or "").lower()
            if not any(token in brand for token in brand_tokens):
                continue
        results.append(item)
    return results


def filter_by_trend(items: List[EnrichedProductRecord], trend: TrendFilter) -> List[EnrichedProductRecord]:
    if trend == TrendFilter.ALL:
        return items
    return [item for item in items if item.trend == trend.value]


def _in_band(price: Optional[int], band: PriceBand) -> bool:
    if price is None:
        return False
    if band == PriceBand.UNDER_5M:
        return price < 5_000_000
    if band == PriceBand.BETWEEN_5M_10M:
        return 5_000_000 <= price <= 10_000_000
    if band == PriceBand.OVER_10M:
        return price > 10_000_000
    return True


def filter_by_price(items: List[EnrichedProductRecord], band: PriceBand) -> List[EnrichedProductRecord]:
    if band == PriceBand.ALL:
        return items
    return [item for item in items if _in_band(item.price, band)]


# =============================================================================
# SORTING / PAGINATION
# =============================================================================

def _price_or(item: EnrichedProductRecord, fallback: float) -> float:
    if item.price is None or not math.isfinite(item.price):
        return fallback
    return float(item.price)


def sort_items(items: List[EnrichedProductRecord], mode: SortMode) -> List[EnrichedProductRecord]:
    """Sort ranked items; missing prices always land at the end"""
    if mode == SortMode.PRICE_ASC:
        return sorted(items, key=lambda i: _price_or(i, math.inf))
    if mode == SortMode.PRICE_DESC:
        return sorted(items, key=lambda i: _price_or(i, -math.inf), reverse=True)
    if mode == SortMode.SOLD_DESC:
        return sorted(items, key=lambda i: i.sold if i.sold is not None else -1, reverse=True)
    return items


def paginate(
    items: List[EnrichedProductRecord],
    page: int,
    page_size: int = PAGE_SIZE,
) -> SearchPage:
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / page_size))
    current = min(max(page, 1), total_pages)
    start = (current - 1) * page_size
    return SearchPage(
        items=items[start:start + page_size],
        page=current,
        total_pages=total_pages,
        total_items=total_items,
        page_size=page_size,
    )


# =============================================================================
# MANUAL RECORDS
# =============================================================================

def submission_to_record(submission: ManualSubmission) -> EnrichedProductRecord:
    """Represent a hand-submitted product as a single-point catalog item"""
    return EnrichedProductRecord(
        sku=slugify(f"{submission.brand}-{submission.name}-{submission.marketplace}"),
        name=submission.name,
        brand=submission.brand,
        category=submission.category,
        marketplace=submission.marketplace,
        url=submission.url,
        sold=submission.sold,
        price=submission.price,
        price_history=[submission.price],
        forecast7=forecast_next7([submission.price]),
        source="manual",
    )


def merge_manual_records(
    items: List[EnrichedProductRecord],
    submissions: Iterable[ManualSubmission] = (),
    corrections: Iterable[PriceFeedback] = (),
) -> List[EnrichedProductRecord]:
    """
    Build the search corpus from catalog items plus manual data.

    Submissions are appended unless their SKU already exists. The newest
    correction per SKU replaces that item's price and fills in marketplace
    and URL when it carries them.
    """
    corpus = list(items)
    known = {item.sku for item in corpus}

    for submission in submissions:
        record = submission_to_record(submission)
        if record.sku in known:
            continue
        corpus.append(record)
        known.add(record.sku)

    latest = {}
    for correction in sorted(corrections, key=lambda c: c.timestamp):
        latest[correction.sku] = correction

    if latest:
        for index, item in enumerate(corpus):
            correction = latest.get(item.sku)
            if correction is None:
                continue
            corpus[index] = item.model_copy(update={
                "price": correction.new_price,
                "marketplace": correction.marketplace or item.marketplace,
                "url": correction.url or item.url,
            })

    return corpus


# =============================================================================
# SEARCH
# =============================================================================

def search(
    items: List[EnrichedProductRecord],
    query: str,
    filters: Optional[SearchFilters] = None,
    page: int = 1,
    page_size: int = PAGE_SIZE,
    max_tokens: int = MAX_TOKENS,
    token_match: TokenMatch = TokenMatch.ALL,
) -> SearchPage:
    """
    Run the full search pipeline over an item collection.

    Pipeline:
    1. Tokenize the query
    2. Filter by tokens/SKU/brand, trend and price band
    3. Rank by relevance
    4. Sort and paginate
    """
    query = (query or "").strip()
    if not query:
        return SearchPage(page_size=page_size)

    filters = filters or SearchFilters()
    tokens = tokenize_query(query, max_tokens)

    candidates = filter_by_tokens(items, tokens, query, token_match)
    candidates = filter_by_trend(candidates, filters.trend)
    candidates = filter_by_price(candidates, filters.price_band)
    ranked = rank_products(query, candidates)
    ordered = sort_items(ranked, filters.sort)

    logger.debug("Search executed", query=query, tokens=tokens, matches=len(ordered))
    return paginate(ordered, page, page_size)
