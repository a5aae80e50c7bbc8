"""
Unit Tests - Search Pipeline
"""
from datetime import datetime, timedelta, timezone

import pytest

from pricewatch.config import Settings
from pricewatch.config.settings import SearchSettings
from pricewatch.models import ManualSubmission, PriceFeedback
from pricewatch.search.pipeline import (
    PriceBand,
    SearchFilters,
    SortMode,
    TokenMatch,
    TrendFilter,
    filter_by_price,
    filter_by_tokens,
    filter_by_trend,
    merge_manual_records,
    paginate,
    search,
    sort_items,
    submission_to_record,
    tokenize_query,
)
from pricewatch.search.service import SearchService
from pricewatch.storage import CatalogStore, ManualStore


class TestTokenizeQuery:
    """Tests for query tokenization"""

    def test_strips_stop_words_and_short_tokens(self):
        assert tokenize_query("Laptop ASUS dengan i5!") == ["laptop", "asus", "i5"]

    def test_dedupes_and_caps(self):
        tokens = tokenize_query("asus asus rog strix g16 ryzen rtx 4060")
        assert tokens == ["asus", "rog", "strix", "g16", "ryzen"]

    def test_falls_back_to_loose_tokens(self):
        assert tokenize_query("a dan") == ["a", "dan"]


class TestFilters:
    """Tests for candidate filters"""

    def test_all_tokens_must_match_by_default(self, sample_records):
        tokens = tokenize_query("asus strix")
        result = filter_by_tokens(sample_records, tokens, "asus strix")

        assert [r.sku for r in result] == ["asus-rog-strix-g16"]

    def test_any_token_policy(self, sample_records):
        tokens = tokenize_query("ideapad aspire")
        result = filter_by_tokens(sample_records, tokens, "ideapad aspire", TokenMatch.ANY)

        assert {r.sku for r in result} == {"lenovo-ideapad-slim-3", "acer-aspire-3"}

    def test_hyphenated_query_matches_condensed_sku(self, sample_records):
        query = "vivobook-14"
        result = filter_by_tokens(sample_records, tokenize_query(query), query)

        assert [r.sku for r in result] == ["asus-vivobook-14"]

    def test_brand_keyword_must_match_brand(self, record_factory):
        sleeve = record_factory("sleeve", name="Sleeve for ASUS 14 inch", brand="Lenovo")
        result = filter_by_tokens([sleeve], ["asus"], "asus")

        assert result == []

    def test_trend_filter(self, sample_records):
        result = filter_by_trend(sample_records, TrendFilter.DOWN)
        assert {r.sku for r in result} == {"asus-vivobook-14", "acer-aspire-3"}

    @pytest.mark.parametrize("band,expected", [
        (PriceBand.UNDER_5M, {"acer-aspire-3"}),
        (PriceBand.BETWEEN_5M_10M, {"asus-vivobook-14", "lenovo-ideapad-slim-3"}),
        (PriceBand.OVER_10M, {"asus-rog-strix-g16"}),
    ])
    def test_price_bands(self, sample_records, band, expected):
        assert {r.sku for r in filter_by_price(sample_records, band)} == expected

    def test_price_band_excludes_missing_price(self, record_factory):
        unpriced = record_factory("x", price=None)
        assert filter_by_price([unpriced], PriceBand.UNDER_5M) == []

    def test_unknown_filter_values_fall_back(self):
        filters = SearchFilters.parse(trend="sideways", price_band="cheap", sort="random")
        assert filters == SearchFilters()

    def test_filter_values_are_case_insensitive(self):
        filters = SearchFilters.parse(trend="UP", price_band="GT-10000K", sort="Price-Asc")

        assert filters.trend == TrendFilter.UP
        assert filters.price_band == PriceBand.OVER_10M
        assert filters.sort == SortMode.PRICE_ASC


class TestSortAndPaginate:
    """Tests for ordering and paging"""

    def test_price_sorts_put_missing_last(self, record_factory):
        items = [
            record_factory("b", price=None),
            record_factory("c", price=300),
            record_factory("a", price=100),
        ]

        assert [i.sku for i in sort_items(items, SortMode.PRICE_ASC)] == ["a", "c", "b"]
        assert [i.sku for i in sort_items(items, SortMode.PRICE_DESC)] == ["c", "a", "b"]

    def test_sold_desc(self, sample_records):
        ordered = sort_items(sample_records, SortMode.SOLD_DESC)
        assert [i.sku for i in ordered][0] == "asus-vivobook-14"
        assert ordered[-1].sku == "acer-aspire-3"

    def test_relevance_keeps_order(self, sample_records):
        assert sort_items(sample_records, SortMode.RELEVANCE) == sample_records

    def test_page_count(self, record_factory):
        items = [record_factory(f"sku-{i}") for i in range(50)]
        page = paginate(items, 1)

        assert page.total_pages == 3
        assert page.total_items == 50
        assert len(page.items) == 24

    def test_empty_collection_has_one_page(self):
        page = paginate([], 1)

        assert page.total_pages == 1
        assert page.page == 1
        assert page.items == []

    def test_out_of_range_page_clamped(self, record_factory):
        items = [record_factory(f"sku-{i}") for i in range(30)]
        page = paginate(items, 999)

        assert page.page == 2
        assert [i.sku for i in page.items] == [f"sku-{i}" for i in range(24, 30)]

    def test_serialized_keys_are_camel_case(self):
        payload = paginate([], 1).to_json_dict()
        assert set(payload) == {"items", "page", "totalPages", "totalItems", "pageSize"}


class TestManualRecords:
    """Tests for merging manual data into the corpus"""

    def test_submission_becomes_manual_record(self):
        submission = ManualSubmission(name="Zenbook 14", brand="ASUS", marketplace="Shopee", price=15_000_000)
        record = submission_to_record(submission)

        assert record.sku == "asus-zenbook-14-shopee"
        assert record.source == "manual"
        assert record.price_history == [15_000_000]
        assert record.forecast7 == pytest.approx([15_000_000] * 7)

    def test_existing_sku_not_duplicated(self, record_factory):
        existing = record_factory("asus-zenbook-14-shopee", price=14_000_000)
        submission = ManualSubmission(name="Zenbook 14", brand="ASUS", marketplace="Shopee", price=15_000_000)

        corpus = merge_manual_records([existing], [submission])

        assert len(corpus) == 1
        assert corpus[0].price == 14_000_000

    def test_latest_correction_wins(self, record_factory):
        item = record_factory("asus-vivobook-14", price=7_000_000, url=None)
        now = datetime.now(timezone.utc)
        older = PriceFeedback(sku="asus-vivobook-14", new_price=6_500_000, timestamp=now - timedelta(hours=1))
        newer = PriceFeedback(
            sku="asus-vivobook-14",
            new_price=6_800_000,
            url="https://shop.example/vb14",
            timestamp=now,
        )

        corpus = merge_manual_records([item], [], [newer, older])

        assert corpus[0].price == 6_800_000
        assert corpus[0].url == "https://shop.example/vb14"
        assert item.price == 7_000_000


class TestSearch:
    """Tests for the full pipeline"""

    def test_empty_query_returns_empty_page(self, sample_records):
        page = search(sample_records, "   ")

        assert page.items == []
        assert page.total_items == 0
        assert page.total_pages == 1

    def test_brand_query(self, sample_records):
        page = search(sample_records, "asus")
        assert {i.sku for i in page.items} == {"asus-vivobook-14", "asus-rog-strix-g16"}

    def test_filters_applied(self, sample_records):
        page = search(sample_records, "asus", SearchFilters.parse(trend="up"))
        assert [i.sku for i in page.items] == ["asus-rog-strix-g16"]

    def test_sort_override(self, sample_records):
        page = search(sample_records, "laptop", SearchFilters.parse(sort="price-asc"))
        prices = [i.price for i in page.items]

        assert prices == sorted(prices)
        assert len(prices) == 4


class TestSearchService:
    """Tests for the store-backed service"""

    @pytest.fixture
    def service(self, tmp_path, sample_records):
        catalog = CatalogStore(tmp_path / "products.json")
        catalog.save(sample_records)
        manual = ManualStore(tmp_path / "manual")
        settings = Settings(app_env="testing", search=SearchSettings(page_size=2))
        return SearchService(catalog, manual, settings)

    def test_uses_configured_page_size(self, service):
        page = service.search("laptop")

        assert page.page_size == 2
        assert page.total_pages == 2

    def test_manual_submission_searchable(self, service):
        service.manual.add_submission(
            ManualSubmission(name="Zyrex Sky 232", brand="Zyrex", marketplace="Shopee", price=3_000_000)
        )

        page = service.search("zyrex")

        assert [i.sku for i in page.items] == ["zyrex-zyrex-sky-232-shopee"]
        assert page.items[0].source == "manual"

    def test_empty_query_skips_catalog(self, service, monkeypatch):
        def fail():
            raise AssertionError("catalog should not be loaded")

        monkeypatch.setattr(service.catalog, "load", fail)

        assert service.search("").total_items == 0
