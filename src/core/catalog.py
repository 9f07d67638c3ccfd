from dataclasses import dataclass
from typing import Iterable, List

from db.models import Product

ALL = "All"
PRICE_RANGES = [ALL, "0-50", "50-100", "100-200", "200+"]
PRICE_RANGE_LABELS = {
    ALL: "All Prices",
    "0-50": "$0 - $50",
    "50-100": "$50 - $100",
    "100-200": "$100 - $200",
    "200+": "$200+",
}


@dataclass(frozen=True)
class ProductFilters:
    category: str = ALL
    price_range: str = ALL
    search_term: str = ""
    # widen the search term to categories
    match_category: bool = False


def in_price_range(price: float, price_range: str) -> bool:
    """
    Buckets: 0-50 includes both ends, the middle buckets exclude their lower
    bound, 200+ is strictly above 200.
    """
    if price_range == ALL:
        return True
    if price_range == "0-50":
        return 0 <= price <= 50
    if price_range == "50-100":
        return 50 < price <= 100
    if price_range == "100-200":
        return 100 < price <= 200
    if price_range == "200+":
        return price > 200
    raise ValueError(f"Unknown price range: {price_range}")


def filter_products(products: Iterable[Product], filters: ProductFilters) -> List[Product]:
    """
    Apply search term, category and price range, keeping the input order.

    The term matches name or description; with `match_category` it goes
    through search_products and matches the category too. The category
    filter is an exact match against the product's category.
    """
    if filters.match_category:
        candidates = search_products(products, filters.search_term)
        term = ""
    else:
        candidates = list(products)
        term = filters.search_term.strip().lower()

    result = []
    for p in candidates:
        if term and term not in p.name.lower() and term not in p.description.lower():
            continue
        if filters.category != ALL and p.category != filters.category:
            continue
        if not in_price_range(p.price, filters.price_range):
            continue
        result.append(p)
    return result


def search_products(products: Iterable[Product], query: str) -> List[Product]:
    """Free-text search over name, description and category. Empty matches all."""
    term = (query or "").strip().lower()
    return [
        p
        for p in products
        if term in p.name.lower()
        or term in p.description.lower()
        or term in p.category.lower()
    ]


def list_categories(products: Iterable[Product]) -> List[str]:
    """'All' followed by the distinct categories, sorted."""
    return [ALL, *sorted({p.category for p in products if p.category})]
