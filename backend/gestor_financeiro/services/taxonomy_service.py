"""
Resolution of free-text category/subcategory names against the taxonomy.

All functions are read-only and work on lists the caller has already fetched
from the gateway. Nothing is cached here: stale lists give stale answers.
"""

import logging
from typing import Dict, List, Optional, Sequence

from gestor_financeiro.schemas.category import CategoryResponse, SubcategoryResponse
from gestor_financeiro.text import normalize

logger = logging.getLogger(__name__)


def resolve_category_by_name(
    name: str,
    categories: Sequence[CategoryResponse]
) -> Optional[CategoryResponse]:
    """Find a category by accent/case-insensitive name, falling back to a plain case-insensitive match."""
    target = normalize(name)
    for category in categories:
        if normalize(category.name or "") == target:
            return category

    lowered = name.lower()
    for category in categories:
        if (category.name or "").lower() == lowered:
            return category

    return None


def resolve_subcategory_id(
    category_name: str,
    subcategory_name: str,
    subcategories: Sequence[SubcategoryResponse],
    categories: Sequence[CategoryResponse]
) -> Optional[str]:
    """
    Resolve the id of ``subcategory_name`` inside ``category_name``.

    Returns None when either the category or the subcategory is unknown.
    """
    category = resolve_category_by_name(category_name, categories)
    if category is None:
        logger.warning(f"Category '{category_name}' not found")
        return None

    target = normalize(subcategory_name)
    for subcategory in subcategories:
        if subcategory.category_id == category.id and normalize(subcategory.name or "") == target:
            return subcategory.id

    logger.warning(f"Subcategory '{subcategory_name}' not found for category '{category_name}'")
    return None


def list_subcategory_names_for_category(
    category_name: str,
    categories: Sequence[CategoryResponse],
    subcategories: Sequence[SubcategoryResponse]
) -> List[str]:
    category = resolve_category_by_name(category_name, categories)
    if category is None:
        return []
    return sorted(s.name for s in subcategories if s.category_id == category.id and s.name)


class TaxonomyIndex:
    """Id lookups used to denormalize display names onto expenses and goals."""

    def __init__(
        self,
        categories: Sequence[CategoryResponse],
        subcategories: Sequence[SubcategoryResponse]
    ):
        self.categories: Dict[str, CategoryResponse] = {c.id: c for c in categories}
        self.subcategories: Dict[str, SubcategoryResponse] = {s.id: s for s in subcategories}

    def category_name(self, category_id: Optional[str]) -> Optional[str]:
        category = self.categories.get(category_id) if category_id else None
        return category.name if category else None

    def subcategory_name(self, subcategory_id: Optional[str]) -> Optional[str]:
        subcategory = self.subcategories.get(subcategory_id) if subcategory_id else None
        return subcategory.name if subcategory else None

    def category_name_for_subcategory(self, subcategory_id: Optional[str]) -> Optional[str]:
        subcategory = self.subcategories.get(subcategory_id) if subcategory_id else None
        if subcategory is None:
            return None
        return self.category_name(subcategory.category_id)


def build_taxonomy_index(
    categories: Sequence[CategoryResponse],
    subcategories: Sequence[SubcategoryResponse]
) -> TaxonomyIndex:
    return TaxonomyIndex(categories, subcategories)
