import unittest
from unittest.mock import MagicMock

import requests
from helpers import make_product, make_review

from db.models import Order, OrderItem
from db.remote import ProductStore
from utils.errors import NotFoundError, TransportError

PRODUCT_JSON = {
    "id": 1,
    "name": "Lamp",
    "price": 10,
    "stock": 4,
    "category": "Home",
    "description": "Warm light",
    "imageUrl": "https://img.example.com/lamp.png",
    "reviews": [
        {"userId": "bob@example.com", "rating": 4, "comment": "Nice", "date": "2026-10-01"}
    ],
    "featured": True,
}


def fake_response(status_code=200, payload=None, content=b"x"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = content
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class ProductStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.session = MagicMock()
        self.store = ProductStore("http://shop.test/", session=self.session, timeout=3)

    def last_call(self):
        args, kwargs = self.session.request.call_args
        return args, kwargs

    async def test_list_products(self):
        self.session.request.return_value = fake_response(payload=[PRODUCT_JSON])
        products = await self.store.list_products()

        self.assertEqual(len(products), 1)
        p = products[0]
        self.assertEqual((p.id, p.name, p.price, p.stock), (1, "Lamp", 10.0, 4))
        self.assertEqual(p.average_rating, 4.0)
        args, kwargs = self.last_call()
        self.assertEqual(args, ("GET", "http://shop.test/products"))
        self.assertEqual(kwargs["timeout"], 3)

    async def test_get_product_not_found(self):
        self.session.request.return_value = fake_response(404, payload={})
        with self.assertRaises(NotFoundError):
            await self.store.get_product(42)

    async def test_replace_product_keeps_unknown_fields(self):
        self.session.request.return_value = fake_response(payload=PRODUCT_JSON)
        product = (await self.store.get_product(1)).with_review(
            make_review("alice@example.com", 5, "Great", "2026-10-19")
        )

        self.session.request.return_value = fake_response(content=b"")
        saved = await self.store.replace_product(product)
        self.assertEqual(saved, product)

        args, kwargs = self.last_call()
        self.assertEqual(args, ("PUT", "http://shop.test/products/1"))
        body = kwargs["json"]
        self.assertTrue(body["featured"])
        self.assertEqual(body["imageUrl"], PRODUCT_JSON["imageUrl"])
        self.assertEqual([r["userId"] for r in body["reviews"]], ["bob@example.com", "alice@example.com"])

    async def test_create_and_list_orders(self):
        order = Order(
            id="ORD1",
            user_id="alice@example.com",
            date="Oct 19, 2026",
            total=20.0,
            status="Processing",
            items=(OrderItem(1, "Lamp", 10.0, 2),),
        )
        self.session.request.return_value = fake_response(201, payload=order.to_dict())
        created = await self.store.create_order(order)
        self.assertEqual(created, order)
        args, kwargs = self.last_call()
        self.assertEqual(args, ("POST", "http://shop.test/orders"))
        self.assertEqual(kwargs["json"]["items"][0]["productId"], 1)

        self.session.request.return_value = fake_response(payload=[order.to_dict()])
        self.assertEqual(await self.store.list_orders(), [order])

    async def test_transport_failures(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(TransportError):
            await self.store.list_products()

        self.session.request.side_effect = None
        self.session.request.return_value = fake_response(500, payload={})
        with self.assertRaises(TransportError) as ctx:
            await self.store.list_orders()
        self.assertEqual(ctx.exception.status_code, 500)

        self.session.request.return_value = fake_response(payload=ValueError("bad json"))
        with self.assertRaises(TransportError):
            await self.store.list_products()

    async def test_unexpected_body_shapes_become_transport_errors(self):
        bad_review = dict(PRODUCT_JSON, reviews=[{"rating": 5, "comment": "no user"}])
        self.session.request.return_value = fake_response(payload=bad_review)
        with self.assertRaises(TransportError):
            await self.store.get_product(1)

        # an object where a list is expected
        self.session.request.return_value = fake_response(payload={"error": "oops"})
        with self.assertRaises(TransportError):
            await self.store.list_products()
        with self.assertRaises(TransportError):
            await self.store.list_orders()

        self.session.request.return_value = fake_response(payload=["not an object"])
        with self.assertRaises(TransportError):
            await self.store.list_products()

        self.session.request.return_value = fake_response(payload=[{"total": 3}])
        with self.assertRaises(TransportError):
            await self.store.list_orders()

        self.session.request.return_value = fake_response(201, payload="created")
        order = Order("ORD1", "a@example.com", "Oct 19, 2026", 1.0, "Processing", ())
        with self.assertRaises(TransportError):
            await self.store.create_order(order)

    async def test_close_closes_session(self):
        await self.store.close()
        self.session.close.assert_called_once()


class ProductModelTestCase(unittest.TestCase):
    def test_with_review_does_not_mutate(self):
        p = make_product(1, reviews=(make_review("bob@example.com", 2),))
        updated = p.with_review(make_review("bob@example.com", 4))
        self.assertEqual(p.reviews[0].rating, 2)
        self.assertEqual(updated.reviews[0].rating, 4)
        self.assertEqual(updated.average_rating, 4.0)

    def test_no_reviews_means_no_average(self):
        self.assertIsNone(make_product(1).average_rating)
        self.assertFalse(make_product(1, stock=0).in_stock)


if __name__ == "__main__":
    unittest.main()
