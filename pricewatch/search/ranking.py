"""
Ranking Engine

Heuristic relevance scoring of catalog items against a free-text query.
"""

import math
import re
from typing import List

from pricewatch.models import EnrichedProductRecord


BRAND_KEYWORDS = frozenset([
    "asus",
    "acer",
    "lenovo",
    "hp",
    "dell",
    "msi",
    "apple",
    "samsung",
    "huawei",
    "lg",
    "xiaomi",
    "razer",
    "axioo",
    "zyrex",
    "infinix",
    "gigabyte",
    "surface",
])

# Score weights
PHRASE_MATCH = 10.0
BRAND_MATCH = 4.0
BRAND_MISMATCH = -5.0
BRAND_CONFLICT = -5.0
NAME_TOKEN = 1.5
SKU_MATCH = 6.0
SKU_CONDENSED_MATCH = 3.0
FALLING_PRICE = 2.0
ON_SALE = 3.0
POPULARITY_CAP = 6.0

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WORD_SPLIT = re.compile(r"[^a-z0-9]+")


def condense(value: str) -> str:
    """Lowercase and drop everything but letters and digits"""
    return _NON_ALNUM.sub("", value.lower())


def score_query(query: str, product: EnrichedProductRecord) -> float:
    """Score one product against a query; higher is more relevant"""
    q = query.strip().lower()
    if not q:
        return 0.0

    name = product.name.lower()
    brand = (product.brand or "").lower()
    haystack = f"{name} {brand} {(product.category or '').lower()}"
    score = 0.0

    if q in haystack:
        score += PHRASE_MATCH

    tokens = [t for t in q.split() if t]
    brand_tokens = [t for t in tokens if t in BRAND_KEYWORDS]
    if brand_tokens:
        matched = [t for t in brand_tokens if t in brand]
        score += BRAND_MATCH * len(matched)
        if brand and not matched:
            score += BRAND_MISMATCH
        words = set(_WORD_SPLIT.split(product.searchable_text))
        if any(kw in words for kw in BRAND_KEYWORDS if kw not in brand_tokens):
            score += BRAND_CONFLICT

    score += NAME_TOKEN * sum(1 for t in tokens if t in name)

    sku = product.sku.lower()
    if q in sku:
        score += SKU_MATCH
    condensed_query = condense(q)
    if condensed_query and condensed_query in condense(sku):
        score += SKU_CONDENSED_MATCH

    if product.trend == "down":
        score += FALLING_PRICE
    if product.is_on_sale:
        score += ON_SALE
    if product.sold is not None and product.sold > 0:
        score += min(POPULARITY_CAP, math.log10(product.sold + 1) * 2)

    return score


def rank_products(query: str, products: List[EnrichedProductRecord]) -> List[EnrichedProductRecord]:
    """Order products by descending score; ties keep their input order"""
    scored = [(score_query(query, p), p) for p in products]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [p for _, p in scored]
