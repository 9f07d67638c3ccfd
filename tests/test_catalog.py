import unittest

from helpers import make_product

from core.catalog import (
    ALL,
    ProductFilters,
    filter_products,
    in_price_range,
    list_categories,
    search_products,
)

PRODUCTS = [
    make_product(1, "Desk Lamp", 49.99, category="Home", description="Warm light"),
    make_product(2, "Headphones", 50.0, category="Electronics", description="Noise cancelling"),
    make_product(3, "Monitor", 199.0, category="Electronics", description="27 inch"),
    make_product(4, "Sofa", 899.0, category="Home", description="Seats three"),
    make_product(5, "Mug", 100.0, category="Kitchen", description="Holds light roast"),
]


class CatalogTestCase(unittest.TestCase):
    def ids(self, products):
        return [p.id for p in products]

    def test_price_buckets(self):
        self.assertTrue(in_price_range(0, "0-50"))
        self.assertTrue(in_price_range(50, "0-50"))
        self.assertFalse(in_price_range(50, "50-100"))
        self.assertTrue(in_price_range(100, "50-100"))
        self.assertTrue(in_price_range(200, "100-200"))
        self.assertFalse(in_price_range(200, "200+"))
        self.assertTrue(in_price_range(200.01, "200+"))
        self.assertTrue(in_price_range(123, ALL))
        with self.assertRaises(ValueError):
            in_price_range(10, "cheap")

    def test_filter_by_each_criterion(self):
        self.assertEqual(self.ids(filter_products(PRODUCTS, ProductFilters())), [1, 2, 3, 4, 5])
        self.assertEqual(
            self.ids(filter_products(PRODUCTS, ProductFilters(category="Electronics"))),
            [2, 3],
        )
        self.assertEqual(
            self.ids(filter_products(PRODUCTS, ProductFilters(price_range="0-50"))),
            [1, 2],
        )
        # term matches name or description
        self.assertEqual(
            self.ids(filter_products(PRODUCTS, ProductFilters(search_term=" LIGHT "))),
            [1, 5],
        )

    def test_filters_combine(self):
        filters = ProductFilters(category="Home", price_range="200+", search_term="so")
        self.assertEqual(self.ids(filter_products(PRODUCTS, filters)), [4])
        filters = ProductFilters(category="Kitchen", price_range="0-50")
        self.assertEqual(filter_products(PRODUCTS, filters), [])

    def test_category_filter_is_exact(self):
        self.assertEqual(filter_products(PRODUCTS, ProductFilters(category="electronics")), [])
        self.assertEqual(filter_products(PRODUCTS, ProductFilters(category="Elec")), [])

    def test_term_can_match_category(self):
        # "kitchen" only appears as a category
        plain = ProductFilters(search_term="kitchen")
        self.assertEqual(filter_products(PRODUCTS, plain), [])

        widened = ProductFilters(search_term="kitchen", match_category=True)
        self.assertEqual(self.ids(filter_products(PRODUCTS, widened)), [5])

        # other filters still apply on top
        widened = ProductFilters(
            search_term="electronics", match_category=True, price_range="100-200"
        )
        self.assertEqual(self.ids(filter_products(PRODUCTS, widened)), [3])

    def test_search(self):
        self.assertEqual(self.ids(search_products(PRODUCTS, "electronics")), [2, 3])
        self.assertEqual(self.ids(search_products(PRODUCTS, "inch")), [3])
        self.assertEqual(self.ids(search_products(PRODUCTS, "")), [1, 2, 3, 4, 5])

    def test_categories(self):
        self.assertEqual(list_categories(PRODUCTS), [ALL, "Electronics", "Home", "Kitchen"])
        self.assertEqual(list_categories([]), [ALL])


if __name__ == "__main__":
    unittest.main()
