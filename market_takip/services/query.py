"""Filtering and sorting of product snapshots."""

import unicodedata
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple, Union

from ..models.product import Category, Product

ALL_CATEGORIES = "all"


class SortOption(str, Enum):
    """Sort orders offered by the product list."""

    EXPIRY_ASC = "expiry_asc"
    EXPIRY_DESC = "expiry_desc"
    NAME_ASC = "name_asc"
    QUANTITY_DESC = "quantity_desc"


def collation_key(name: str) -> Tuple[str, str]:
    """Locale-style sort key: accents folded, case ignored, original as tie-break."""
    decomposed = unicodedata.normalize("NFKD", name)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # dotless i has no decomposition
    folded = folded.replace("ı", "i").casefold()
    return folded, name


_SORTS: Dict[SortOption, Tuple[Callable[[Product], object], bool]] = {
    SortOption.EXPIRY_ASC: (lambda p: p.expiry_date, False),
    SortOption.EXPIRY_DESC: (lambda p: p.expiry_date, True),
    SortOption.NAME_ASC: (lambda p: collation_key(p.name), False),
    SortOption.QUANTITY_DESC: (lambda p: p.quantity, True),
}


def matches(product: Product, search_text: str, category_filter: str) -> bool:
    """Text OR barcode match, AND category match."""
    text_ok = (
        search_text.lower() in product.name.lower()
        or search_text in product.barcode
    )
    category_ok = category_filter == ALL_CATEGORIES or product.category.value == category_filter
    return text_ok and category_ok


def query(
    products: Sequence[Product],
    search_text: str = "",
    category_filter: Union[str, Category] = ALL_CATEGORIES,
    sort_option: Union[str, SortOption] = SortOption.EXPIRY_ASC
) -> List[Product]:
    """
    Filter then sort a product snapshot into a new list.

    Args:
        products: Source collection (left untouched)
        search_text: Case-insensitive name match or raw barcode match
        category_filter: ``"all"`` or a category label
        sort_option: One of ``SortOption``

    Returns:
        A fresh list; sorting is stable, so equal keys keep input order

    Raises:
        ValueError: If the sort option is unknown
    """
    option = SortOption(sort_option)
    if isinstance(category_filter, Category):
        category_filter = category_filter.value

    filtered = [p for p in products if matches(p, search_text or "", category_filter)]

    key, reverse = _SORTS[option]
    # reverse=True keeps equal elements in their original order
    return sorted(filtered, key=key, reverse=reverse)
