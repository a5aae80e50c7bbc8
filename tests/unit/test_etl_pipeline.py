"""
Unit Tests - Catalog ETL Pipeline
"""
import httpx

from pricewatch.etl.pipeline import CatalogETL, run_etl
from pricewatch.etl.sources import CsvSource, discover_csv_sources, is_laptop_csv
from pricewatch.exceptions import SourceReadError
from pricewatch.search.pipeline import search

ASUS_ZEN_CSV = (
    "name,brand,price,date\n"
    "Asus Zen,Asus,10.000.000,2024-01-01\n"
    "Asus Zen,Asus,11.000.000,2024-01-08\n"
)


class TestSources:
    """Tests for CSV discovery and reading"""

    def test_is_laptop_csv(self):
        assert is_laptop_csv("data/raw/laptop/Jan 2024/x.csv")
        assert is_laptop_csv("data/raw/Laptop/x.CSV")
        assert not is_laptop_csv("data/raw/phone/x.csv")
        assert not is_laptop_csv("data/raw/laptop/notes.txt")

    def test_discover_sorted(self, tmp_path):
        folder = tmp_path / "laptop" / "January 2024" / "Shopee" / "ASUS"
        folder.mkdir(parents=True)
        for name in ["b.csv", "a.csv", "readme.md"]:
            (folder / name).write_text("name,price\n", encoding="utf-8")
        (tmp_path / "other.csv").write_text("name,price\n", encoding="utf-8")

        keys = [s.key for s in discover_csv_sources(tmp_path)]

        assert [k.rsplit("/", 1)[-1] for k in keys] == ["a.csv", "b.csv"]

    def test_discover_orders_by_file_date(self, tmp_path):
        folder = tmp_path / "laptop"
        folder.mkdir()
        for name in ["dump_01_02_2024.csv", "dump_08_01_2024.csv", "undated.csv"]:
            (folder / name).write_text("name,price\n", encoding="utf-8")

        keys = [s.key for s in discover_csv_sources(tmp_path)]

        assert [k.rsplit("/", 1)[-1] for k in keys] == [
            "undated.csv",
            "dump_08_01_2024.csv",
            "dump_01_02_2024.csv",
        ]

    def test_discover_missing_root(self, tmp_path):
        assert discover_csv_sources(tmp_path / "nope") == []

    def test_missing_file_raises_source_error(self, tmp_path):
        source = CsvSource.from_path(tmp_path / "laptop" / "gone.csv")

        try:
            source.read()
        except SourceReadError as e:
            assert e.context["key"] == source.key
        else:
            raise AssertionError("expected SourceReadError")

    def test_url_source(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=ASUS_ZEN_CSV)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        source = CsvSource.from_url(
            "catalog/raw/laptop/January 2024/Shopee/Asus/zen.csv",
            "https://blob.example/zen.csv",
            client,
            blob_prefix="catalog",
        )

        assert source.read() == ASUS_ZEN_CSV
        assert source.hint().marketplace == "Shopee"
        assert source.hint().yyyymmdd == "20240101"


class TestCatalogETL:
    """Tests for the end-to-end run"""

    def test_two_snapshots_merge_into_one_rising_product(self, test_settings):
        records = run_etl([CsvSource.from_text("upload/zen.csv", ASUS_ZEN_CSV)], test_settings)

        page = search(records, "asus")

        assert page.total_items == 1
        product = page.items[0]
        assert product.price == 11_000_000
        assert product.price_history == [10_000_000, 11_000_000]
        assert len(product.forecast7) == 7
        assert product.trend == "up"
        assert product.direction == "up"

    def test_bad_file_skipped(self, test_settings, tmp_path):
        sources = [
            CsvSource.from_path(tmp_path / "laptop" / "missing.csv"),
            CsvSource.from_text("upload/zen.csv", ASUS_ZEN_CSV),
        ]

        result = CatalogETL(test_settings).run(sources)

        assert result.files_total == 2
        assert result.files_processed == 1
        assert result.files_failed == 1
        assert len(result.records) == 1
        assert result.rows_loaded == 2

    def test_hints_from_tree(self, test_settings, raw_tree):
        result = CatalogETL(test_settings).run(discover_csv_sources(raw_tree))

        by_name = {r.name: r for r in result.records}
        vivobook = by_name["ASUS Vivobook 14 A1404"]

        assert vivobook.brand == "ASUS"
        assert vivobook.marketplace == "Tokopedia"
        assert vivobook.sku == "asus-asus-vivobook-14-a1404-20240105"
        assert vivobook.url == "https://shop.example/asus-a1404"
        assert by_name["Lenovo IdeaPad Slim 3"].sold == 350

    def test_same_product_across_files(self, test_settings):
        first = CsvSource.from_text("laptop/a.csv", "sku,name,price,date\nZB-14,Zenbook,100,2024-01-02\n")
        second = CsvSource.from_text(
            "laptop/b.csv",
            "sku,name,price,date\nZB-14,Zenbook 14 OLED,90,2024-01-01\nZB-14,Zenbook,95,2024-01-02\n",
        )

        records = run_etl([first, second], test_settings)

        assert len(records) == 1
        assert records[0].sku == "zb-14"
        assert records[0].name == "Zenbook 14 OLED"
        assert records[0].price_history == [90, 95]
