"""Tests for resolving names against the taxonomy."""

from gestor_financeiro.schemas.category import CategoryResponse, SubcategoryResponse
from gestor_financeiro.services.taxonomy_service import (
    TaxonomyIndex,
    list_subcategory_names_for_category,
    resolve_category_by_name,
    resolve_subcategory_id,
)


CATEGORIES = [
    CategoryResponse(id="1", name="Alimentação"),
    CategoryResponse(id="2", name="Transporte"),
]

SUBCATEGORIES = [
    SubcategoryResponse(id="10", name="Restaurante", category_id="1"),
    SubcategoryResponse(id="11", name="Supermercado", category_id="1"),
    SubcategoryResponse(id="20", name="Combustível", category_id="2"),
]


class TestResolveCategory:
    """Test category lookup by name."""

    def test_accent_and_case_insensitive(self):
        """'alimentacao' should match 'Alimentação'."""
        category = resolve_category_by_name("alimentacao", CATEGORIES)
        assert category is not None
        assert category.id == "1"

    def test_unknown_category(self):
        """Unknown names resolve to nothing."""
        assert resolve_category_by_name("Lazer", CATEGORIES) is None


class TestResolveSubcategoryId:
    """Test subcategory id lookup."""

    def test_resolves_within_category(self):
        """Names are matched without regard to accents or case."""
        assert resolve_subcategory_id("alimentacao", "restaurante", SUBCATEGORIES, CATEGORIES) == "10"
        assert resolve_subcategory_id("TRANSPORTE", "combustivel", SUBCATEGORIES, CATEGORIES) == "20"

    def test_subcategory_from_other_category(self):
        """A subcategory only resolves inside its own category."""
        assert resolve_subcategory_id("Transporte", "Restaurante", SUBCATEGORIES, CATEGORIES) is None

    def test_unknown_category(self):
        assert resolve_subcategory_id("Lazer", "Cinema", SUBCATEGORIES, CATEGORIES) is None


class TestSubcategoryNames:
    """Test listing subcategory names of a category."""

    def test_names_sorted(self):
        names = list_subcategory_names_for_category("Alimentação", CATEGORIES, SUBCATEGORIES)
        assert names == ["Restaurante", "Supermercado"]

    def test_unknown_category_is_empty(self):
        assert list_subcategory_names_for_category("Lazer", CATEGORIES, SUBCATEGORIES) == []


class TestTaxonomyIndex:
    """Test id to display name lookups."""

    def test_category_for_subcategory(self):
        index = TaxonomyIndex(CATEGORIES, SUBCATEGORIES)
        assert index.subcategory_name("11") == "Supermercado"
        assert index.category_name_for_subcategory("11") == "Alimentação"

    def test_missing_ids(self):
        index = TaxonomyIndex(CATEGORIES, SUBCATEGORIES)
        assert index.subcategory_name("99") is None
        assert index.category_name_for_subcategory(None) is None
