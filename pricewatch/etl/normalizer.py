"""
Row Normalizer

Turns one raw CSV snapshot into canonical rows.
Handles:
- Header alias resolution (name/title, price/harga, ...)
- Price and sold-count digit extraction
- Snapshot date parsing from columns, folder names and file names
- Brand/marketplace hints inferred from the storage path
- SKU slug generation
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import polars as pl
import structlog

from pricewatch.exceptions import CsvParseError
from pricewatch.models import NormalizedRow

logger = structlog.get_logger(__name__)


MONTHS = {
    "january": "01",
    "february": "02",
    "march": "03",
    "april": "04",
    "may": "05",
    "june": "06",
    "july": "07",
    "august": "08",
    "september": "09",
    "october": "10",
    "november": "11",
    "december": "12",
}

NAME_COLUMNS = ["name", "product_name", "title"]
BRAND_COLUMNS = ["brand"]
CATEGORY_COLUMNS = ["category", "kategori"]
PRICE_COLUMNS = ["price", "harga", "min_price", "max_price"]
MARKETPLACE_COLUMNS = ["marketplace", "source"]
URL_COLUMNS = ["url", "product_url", "link", "productlink", "product_link", "link_produk"]
SOLD_COLUMNS = ["sold", "sold_count", "sold_quantity", "terjual"]
DATE_COLUMNS = ["date", "tanggal", "updated_at", "last_update", "last_updated"]

SKU_MAX_LENGTH = 80

_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{2})[-/](\d{2})$")
_DMY_DATE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$")
_TEXT_DATE = re.compile(r"^([A-Za-z]+)\s+(\d{1,2}),\s*(\d{4})$")
_MONTH_YEAR = re.compile(r"([A-Za-z]+)\s+(\d{4})")
_FILE_DMY = re.compile(r"(\d{1,2})_(\d{1,2})_(\d{4})")
_FILE_ISO = re.compile(r"(\d{4})[-_](\d{1,2})[-_](\d{1,2})")
_NON_DIGIT = re.compile(r"[^0-9]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class PriceHint:
    """Metadata inferred from where a CSV file is stored"""
    brand: Optional[str] = None
    marketplace: Optional[str] = None
    yyyymmdd: Optional[str] = None


# =============================================================================
# DATES
# =============================================================================

def combine_date_parts(
    year: str,
    month: Optional[str] = None,
    day: Optional[str] = None,
) -> Optional[str]:
    """Build a yyyymmdd string, or None when the parts are not a real date"""
    value = f"{year}{(month or '01').zfill(2)}{(day or '01').zfill(2)}"
    try:
        datetime.strptime(value, "%Y%m%d")
    except ValueError:
        return None
    return value


def parse_date(value: Optional[str]) -> Optional[str]:
    """
    Parse a date cell into yyyymmdd.

    Supports ``YYYY-MM-DD``/``YYYY/MM/DD``, ``DD-MM-YYYY``/``DD/MM/YYYY``
    and ``Month DD, YYYY``. Anything else yields None.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    match = _ISO_DATE.match(trimmed)
    if match:
        return combine_date_parts(match.group(1), match.group(2), match.group(3))

    match = _DMY_DATE.match(trimmed)
    if match:
        return combine_date_parts(match.group(3), match.group(2), match.group(1))

    match = _TEXT_DATE.match(trimmed)
    if match:
        month = MONTHS.get(match.group(1).lower())
        if month:
            return combine_date_parts(match.group(3), month, match.group(2))

    return None


def _parse_month_year(value: str) -> Optional[Tuple[str, Optional[str]]]:
    if not value:
        return None
    match = _MONTH_YEAR.search(value)
    if not match:
        return None
    return match.group(2), MONTHS.get(match.group(1).lower())


def _parse_file_date(file_name: str) -> Optional[Tuple[str, str, str]]:
    """Return (year, month, day) carried by a snapshot file name"""
    if not file_name:
        return None
    normalized = file_name.lower()
    match = _FILE_DMY.search(normalized)
    if match:
        return match.group(3), match.group(2), match.group(1)
    match = _FILE_ISO.search(normalized)
    if match:
        return match.group(1), match.group(2), match.group(3)
    return None


# =============================================================================
# PATH HINTS
# =============================================================================

def build_hint(month_year: str, marketplace: str, brand: str, file_name: str) -> PriceHint:
    """Combine folder names and the file name into a PriceHint"""
    base = _parse_month_year(month_year)
    from_file = _parse_file_date(file_name)

    yyyymmdd = None
    if from_file:
        year, month, day = from_file
        yyyymmdd = combine_date_parts(year, month, day)
    elif base and base[1]:
        yyyymmdd = combine_date_parts(base[0], base[1], "01")

    return PriceHint(
        brand=brand.strip() or None,
        marketplace=marketplace.strip() or None,
        yyyymmdd=yyyymmdd,
    )


def _hint_from_segments(segments: List[str]) -> PriceHint:
    idx = next(
        (i for i, segment in enumerate(segments) if segment.lower() == "laptop"),
        -1,
    )
    if idx == -1:
        return PriceHint()

    # Only directories between "laptop" and the file name carry folder hints
    folders = segments[idx + 1:len(segments) - 1]
    month_year, marketplace, brand = (folders + ["", "", ""])[:3]
    file_name = segments[-1] if len(segments) - 1 > idx else ""
    return build_hint(month_year, marketplace, brand, file_name)


def infer_hint(path: str) -> PriceHint:
    """
    Infer brand, marketplace and snapshot date from a file path.

    Expected layout: ``.../laptop/<Month Year>/<Marketplace>/<Brand>/<file>.csv``.
    Paths without a ``laptop`` segment produce an empty hint.
    """
    segments = [s for s in re.split(r"[\\/]+", path) if s]
    return _hint_from_segments(segments)


def infer_hint_from_blob_key(key: str, prefix: str) -> PriceHint:
    """Infer a hint from a ``<prefix>/raw/...`` storage key"""
    raw = re.sub(rf"^{re.escape(prefix)}/raw/", "", key, flags=re.IGNORECASE)
    return infer_hint(raw)


# =============================================================================
# FIELD PARSING
# =============================================================================

def slugify(raw: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim, truncate"""
    sanitized = _NON_ALNUM_RUN.sub("-", raw.lower()).strip("-")
    if sanitized:
        return sanitized[:SKU_MAX_LENGTH]
    return f"sku-{uuid.uuid4().hex[:8]}"


def parse_price(value: str) -> int:
    digits = _NON_DIGIT.sub("", value or "")
    return int(digits) if digits else 0


def parse_sold(value: str) -> Optional[int]:
    digits = _NON_DIGIT.sub("", value or "")
    return int(digits) if digits else None


def _clean_record(record: Dict[str, Any]) -> Dict[str, str]:
    cleaned = {}
    for key, value in record.items():
        if key is None or value is None:
            continue
        cleaned[str(key).strip().lower()] = str(value).strip()
    return cleaned


def _pick(record: Dict[str, str], keys: List[str], fallback: str = "") -> str:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return fallback


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_record(record: Dict[str, Any], hint: Optional[PriceHint] = None) -> Optional[NormalizedRow]:
    """
    Normalize one raw CSV record.

    Args:
        record: Column name -> cell value
        hint: Path-derived defaults for brand, marketplace and date

    Returns:
        NormalizedRow, or None when the row has no name or no positive price
    """
    hint = hint or PriceHint()
    record = _clean_record(record)

    name = _pick(record, NAME_COLUMNS, "Unknown")
    brand = _pick(record, BRAND_COLUMNS, hint.brand or "Unknown")
    category = _pick(record, CATEGORY_COLUMNS, "Laptop")
    price = parse_price(_pick(record, PRICE_COLUMNS, "0"))
    if not name or price <= 0:
        return None

    marketplace = _pick(record, MARKETPLACE_COLUMNS, hint.marketplace or "")
    url = _pick(record, URL_COLUMNS) or None
    sold = parse_sold(_pick(record, SOLD_COLUMNS))

    yyyymmdd = hint.yyyymmdd
    for column in DATE_COLUMNS:
        parsed = parse_date(record.get(column))
        if parsed:
            yyyymmdd = parsed
            break

    # Row dates are observations of the same product; only the snapshot
    # (file) date takes part in the composite identifier.
    explicit_sku = record.get("sku")
    sku = slugify(explicit_sku or f"{brand}-{name}-{hint.yyyymmdd or ''}")

    return NormalizedRow(
        sku=sku,
        name=name,
        brand=brand,
        category=category,
        marketplace=marketplace,
        price=price,
        yyyymmdd=yyyymmdd,
        url=url,
        sold=sold,
    )


def _unquote(value: Optional[str]) -> Optional[str]:
    # Relaxed pass keeps quote characters; drop the enclosing pair only
    if value is None or not value.startswith('"'):
        return value
    inner = value[1:-1] if len(value) > 1 and value.endswith('"') else value[1:]
    return inner.replace('""', '"')


def _read_frame(text: str, quote_char: Optional[str]) -> pl.DataFrame:
    return pl.read_csv(
        text.encode("utf-8"),
        infer_schema_length=0,
        truncate_ragged_lines=True,
        quote_char=quote_char,
        raise_if_empty=False,
    )


def read_csv_records(text: str) -> List[Dict[str, Optional[str]]]:
    """
    Parse CSV text into header-keyed records.

    Every column is read as a string. Short rows are padded with nulls and
    long rows truncated to the header width. When strict quoting fails
    (a stray ``14"`` inside a field, an unbalanced opening quote), the text
    is re-read with quotes as literal characters and enclosing quotes are
    stripped from each value.

    Raises:
        CsvParseError: both the strict and the relaxed pass failed
    """
    text = text.lstrip("\ufeff")
    if not text.strip():
        return []

    try:
        return _read_frame(text, quote_char='"').to_dicts()
    except pl.exceptions.PolarsError as e:
        logger.warning("Strict CSV parse failed, retrying with relaxed quotes", reason=str(e))

    try:
        df = _read_frame(text, quote_char=None)
    except pl.exceptions.PolarsError as e:
        raise CsvParseError(f"Failed to parse CSV: {e}", {"reason": str(e)}) from e

    return [
        {_unquote(key): _unquote(value) for key, value in record.items()}
        for record in df.to_dicts()
    ]


def rows_from_csv(text: str, hint: Optional[PriceHint] = None) -> List[NormalizedRow]:
    """Normalize every usable row of one CSV file"""
    records = read_csv_records(text)
    rows = []
    for record in records:
        normalized = normalize_record(record, hint)
        if normalized is not None:
            rows.append(normalized)

    if len(rows) < len(records):
        logger.debug("Dropped rows without name or price", dropped=len(records) - len(rows))
    return rows
