"""
Unit Tests - Product Accumulation
"""
from pricewatch.etl.accumulator import (
    ProductAccumulator,
    merge_sold,
    prefer_meta_value,
    prefer_url,
)
from pricewatch.models import NormalizedRow


def row(price, yyyymmdd=None, **overrides) -> NormalizedRow:
    fields = {
        "sku": "asus-vivobook-14",
        "name": "Vivobook 14",
        "brand": "ASUS",
        "category": "Laptop",
        "marketplace": "Tokopedia",
        "price": price,
        "yyyymmdd": yyyymmdd,
    }
    fields.update(overrides)
    return NormalizedRow(**fields)


class TestMetaRules:
    """Tests for the metadata preference rules"""

    def test_placeholder_replaced(self):
        assert prefer_meta_value("Unknown", "ASUS") == "ASUS"
        assert prefer_meta_value("-", "Tokopedia") == "Tokopedia"
        assert prefer_meta_value("", "Laptop") == "Laptop"

    def test_longer_meaningful_value_wins(self):
        assert prefer_meta_value("Vivobook", "Vivobook 14 A1404") == "Vivobook 14 A1404"

    def test_shorter_or_equal_value_kept(self):
        assert prefer_meta_value("Vivobook 14", "Vivobook") == "Vivobook 14"
        assert prefer_meta_value("ASUS", "Asus") == "ASUS"

    def test_placeholder_never_replaces_value(self):
        assert prefer_meta_value("ASUS", "Unknown") == "ASUS"

    def test_url_longer_wins(self):
        assert prefer_url("https://a.io/x", "https://a.io/x?ref=1") == "https://a.io/x?ref=1"
        assert prefer_url(None, "") is None

    def test_sold_takes_max(self):
        assert merge_sold(10, 40) == 40
        assert merge_sold(40, 10) == 40
        assert merge_sold(None, 5) == 5
        assert merge_sold(5, None) == 5


class TestProductAccumulator:
    """Tests for per-SKU series building"""

    def test_same_date_last_write_wins(self):
        acc = ProductAccumulator()
        acc.add_rows([row(100, "20240101"), row(105, "20240101"), row(110, "20240102")])

        products = acc.finalize()

        assert len(products) == 1
        assert products[0].price_series == [105, 110]

    def test_dated_entries_sorted_chronologically(self):
        acc = ProductAccumulator()
        acc.add_rows([row(300, "20240103"), row(100, "20240101"), row(200, "20240102")])

        assert acc.finalize()[0].price_series == [100, 200, 300]

    def test_undated_entries_follow_dated_in_arrival_order(self):
        acc = ProductAccumulator()
        acc.add_rows([row(50), row(100, "20240101"), row(70)])

        assert acc.finalize()[0].price_series == [100, 50, 70]

    def test_undated_duplicates_are_kept(self):
        acc = ProductAccumulator()
        acc.add_rows([row(50), row(50)])

        assert acc.finalize()[0].price_series == [50, 50]

    def test_meta_merged_across_rows(self):
        acc = ProductAccumulator()
        acc.add_row(row(100, "20240101", brand="Unknown", url=None, sold=10))
        acc.add_row(row(100, "20240102", name="Vivobook 14 A1404", brand="ASUS",
                        url="https://shop.example/a1404", sold=40))
        acc.add_row(row(100, "20240103", name="Vivobook", sold=25))

        meta = acc.finalize()[0].meta

        assert meta.name == "Vivobook 14 A1404"
        assert meta.brand == "ASUS"
        assert meta.url == "https://shop.example/a1404"
        assert meta.sold == 40

    def test_products_keep_first_seen_order(self):
        acc = ProductAccumulator()
        acc.add_rows([
            row(1, sku="b-product"),
            row(2, sku="a-product"),
            row(3, sku="b-product"),
        ])

        assert [p.meta.sku for p in acc.finalize()] == ["b-product", "a-product"]
        assert len(acc) == 2

    def test_latest_price_is_last_point(self):
        acc = ProductAccumulator()
        acc.add_rows([row(200, "20240102"), row(100, "20240101")])

        assert acc.finalize()[0].latest_price == 200
