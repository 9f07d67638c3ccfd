import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from db.models import Order, Product, Review  # noqa: E402
from db.storage import LocalStorage  # noqa: E402
from utils.errors import NotFoundError, TransportError  # noqa: E402


class StorageTestCase(unittest.IsolatedAsyncioTestCase):
    """Points local storage at a fresh temporary sqlite file for every test."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database.DB_PATH = self.db_path
        db_database._initialized = False
        self.storage = LocalStorage()

    def tearDown(self):
        self.temp_dir.cleanup()


class FakeProductStore:
    """In-memory stand-in for db.remote.ProductStore."""

    def __init__(self, products=(), orders=()):
        self.products = {p.id: p for p in products}
        self.orders = list(orders)
        self.fail_orders = False
        self.replaced = []

    async def list_products(self):
        return list(self.products.values())

    async def get_product(self, product_id):
        if product_id not in self.products:
            raise NotFoundError(f"Product with ID {product_id} not found.")
        return self.products[product_id]

    async def replace_product(self, product):
        self.products[product.id] = product
        self.replaced.append(product)
        return product

    async def list_orders(self):
        return list(self.orders)

    async def create_order(self, order: Order):
        if self.fail_orders:
            raise TransportError("HTTP error! status: 500", status_code=500)
        self.orders.append(order)
        return order

    async def close(self):
        return None


def make_product(pid=1, name="Widget", price=10.0, stock=5, **kwargs) -> Product:
    return Product(id=pid, name=name, price=price, stock=stock, **kwargs)


def make_review(user_id="a@example.com", rating=5, comment="Great", date="2026-10-01"):
    return Review(user_id=user_id, rating=rating, comment=comment, date=date)
