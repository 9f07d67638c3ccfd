import unittest

from helpers import StorageTestCase

from db import database as db_database
from db.storage import CART_KEY, SESSION_KEY


class LocalStorageTestCase(StorageTestCase):
    async def test_table_created_on_first_connect(self):
        async with db_database.connect() as conn:
            self.assertTrue(await db_database._table_exists(conn, "local_storage"))

    async def test_get_set_remove(self):
        self.assertIsNone(await self.storage.get_item("missing"))

        await self.storage.set_item("k", "v1")
        self.assertEqual(await self.storage.get_item("k"), "v1")

        # upsert keeps a single row per key
        await self.storage.set_item("k", "v2")
        self.assertEqual(await self.storage.get_item("k"), "v2")
        self.assertEqual(await self.storage.keys(), ["k"])

        await self.storage.remove_item("k")
        self.assertIsNone(await self.storage.get_item("k"))
        # removing twice is fine
        await self.storage.remove_item("k")

    async def test_json_helpers(self):
        await self.storage.write_json(SESSION_KEY, "alice@example.com")
        self.assertEqual(await self.storage.read_json(SESSION_KEY), "alice@example.com")

        payload = [{"productId": 1, "quantity": 2}]
        await self.storage.write_json(CART_KEY, payload)
        self.assertEqual(await self.storage.read_json(CART_KEY), payload)

    async def test_missing_and_corrupt_values_fall_back_to_default(self):
        self.assertEqual(await self.storage.read_json("nothing", []), [])

        await self.storage.set_item(CART_KEY, "{not json")
        self.assertEqual(await self.storage.read_json(CART_KEY, []), [])
        self.assertIsNone(await self.storage.read_json(CART_KEY))

    async def test_values_survive_reinitialization(self):
        await self.storage.write_json("k", {"a": 1})
        db_database._initialized = False
        self.assertEqual(await self.storage.read_json("k"), {"a": 1})


if __name__ == "__main__":
    unittest.main()
