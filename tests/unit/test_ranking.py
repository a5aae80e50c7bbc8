"""
Unit Tests - Relevance Ranking
"""
import pytest

from pricewatch.search.ranking import condense, rank_products, score_query


class TestScoreQuery:
    """Tests for heuristic scoring"""

    def test_empty_query_scores_zero(self, record_factory):
        assert score_query("   ", record_factory("asus-x")) == 0.0

    def test_condense(self):
        assert condense("A-14 Pro!") == "a14pro"

    def test_brand_match_beats_other_brand(self, record_factory):
        asus = record_factory("asus-vivobook", name="Vivobook 14", brand="ASUS")
        lenovo = record_factory("lenovo-ideapad", name="IdeaPad Slim", brand="Lenovo")

        assert score_query("asus", asus) > score_query("asus", lenovo)

    def test_brand_mismatch_penalized(self, record_factory):
        lenovo = record_factory("lenovo-ideapad", name="IdeaPad Slim", brand="Lenovo")
        assert score_query("asus", lenovo) < 0

    def test_other_brand_word_penalized(self, record_factory):
        clean = record_factory("asus-vivobook", name="ASUS Vivobook", brand="ASUS")
        mixed = record_factory("asus-vivobook-x", name="ASUS Vivobook acer", brand="ASUS")

        assert score_query("asus", clean) - score_query("asus", mixed) == pytest.approx(5.0)

    def test_brand_substring_is_not_a_conflict(self, record_factory):
        # "hp" inside "chip" is not a brand mention
        product = record_factory("asus-chip", name="ASUS chip", brand="ASUS")
        baseline = record_factory("asus-core", name="ASUS core", brand="ASUS")

        assert score_query("asus", product) == score_query("asus", baseline)

    def test_sku_match(self, record_factory):
        with_sku = record_factory("asus-a1404", name="Vivobook", brand="ASUS")
        without = record_factory("asus-x1502", name="Vivobook", brand="ASUS")

        assert score_query("a1404", with_sku) - score_query("a1404", without) == pytest.approx(9.0)

    def test_falling_price_and_sale_bonus(self, record_factory):
        base = record_factory("dell-inspiron", name="Inspiron", brand="Dell")
        falling = record_factory("dell-inspiron", name="Inspiron", brand="Dell", trend="down")
        on_sale = record_factory("dell-inspiron", name="Inspiron", brand="Dell", is_on_sale=True)

        assert score_query("inspiron", falling) - score_query("inspiron", base) == pytest.approx(2.0)
        assert score_query("inspiron", on_sale) - score_query("inspiron", base) == pytest.approx(3.0)

    def test_popularity_capped(self, record_factory):
        base = record_factory("hp-victus", name="Victus", brand="HP")
        popular = record_factory("hp-victus", name="Victus", brand="HP", sold=1_000_000)

        assert score_query("victus", popular) - score_query("victus", base) == pytest.approx(6.0)


class TestRankProducts:
    """Tests for ordering"""

    def test_descending_by_score(self, sample_records):
        ranked = rank_products("asus vivobook", sample_records)
        assert ranked[0].sku == "asus-vivobook-14"

    def test_ties_keep_input_order(self, record_factory):
        products = [record_factory(f"msi-modern-{i}", name="MSI Modern", brand="MSI") for i in range(5)]

        ranked = rank_products("modern", products)

        assert [p.sku for p in ranked] == [p.sku for p in products]

    def test_repeatable(self, sample_records):
        first = rank_products("laptop asus", sample_records)
        second = rank_products("laptop asus", sample_records)

        assert [p.sku for p in first] == [p.sku for p in second]
