"""
Test Suite Configuration
"""
import pytest
from fastapi.testclient import TestClient

from pricewatch.config import Settings
from pricewatch.config.settings import CatalogSettings
from pricewatch.models import EnrichedProductRecord
from pricewatch.serving.api.main import create_api_app


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings rooted in a temporary data directory"""
    return Settings(
        app_env="testing",
        debug=True,
        catalog=CatalogSettings(
            raw_dir=str(tmp_path / "raw"),
            processed_path=str(tmp_path / "processed" / "products.json"),
            manual_dir=str(tmp_path / "manual"),
        ),
    )


@pytest.fixture
def sample_csv_text() -> str:
    """Two-row snapshot with aliased headers"""
    return (
        "title,brand,harga,terjual,link,tanggal\n"
        '"ASUS Vivobook 14 A1404",ASUS,"Rp 7.499.000","1,2rb",https://shop.example/asus-a1404,2024-01-05\n'
        '"Lenovo IdeaPad Slim 3",Lenovo,"Rp 6.299.000","350",https://shop.example/ideapad-slim-3,2024-01-05\n'
    )


@pytest.fixture
def raw_tree(tmp_path, sample_csv_text):
    """Raw CSV tree laid out as laptop/<Month Year>/<Marketplace>/<Brand>/"""
    root = tmp_path / "raw"
    folder = root / "laptop" / "January 2024" / "Tokopedia" / "Various"
    folder.mkdir(parents=True)
    (folder / "snapshot_05_01_2024.csv").write_text(sample_csv_text, encoding="utf-8")
    return root


def make_record(sku: str, **overrides) -> EnrichedProductRecord:
    fields = {
        "sku": sku,
        "name": sku.replace("-", " ").title(),
        "brand": "Unknown",
        "price": 5_000_000,
        "price_history": [5_000_000],
    }
    fields.update(overrides)
    return EnrichedProductRecord(**fields)


@pytest.fixture
def sample_records() -> list:
    """Small enriched catalog spanning brands, trends and price bands"""
    return [
        make_record(
            "asus-vivobook-14",
            name="ASUS Vivobook 14 A1404",
            brand="ASUS",
            marketplace="Tokopedia",
            price=7_499_000,
            trend="down",
            sold=1200,
        ),
        make_record(
            "asus-rog-strix-g16",
            name="ASUS ROG Strix G16",
            brand="ASUS",
            marketplace="Shopee",
            price=21_999_000,
            trend="up",
            sold=80,
        ),
        make_record(
            "lenovo-ideapad-slim-3",
            name="Lenovo IdeaPad Slim 3",
            brand="Lenovo",
            marketplace="Tokopedia",
            price=6_299_000,
            trend="flat",
            sold=350,
        ),
        make_record(
            "acer-aspire-3",
            name="Acer Aspire 3",
            brand="Acer",
            marketplace="Shopee",
            price=4_599_000,
            trend="down",
            sold=None,
        ),
    ]


@pytest.fixture
def client(test_settings) -> TestClient:
    """API test client bound to temporary storage"""
    app = create_api_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def record_factory():
    """Build EnrichedProductRecord instances with sensible defaults"""
    return make_record
