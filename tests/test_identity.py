import unittest

from helpers import StorageTestCase

from core.identity import (
    AccountService,
    IdentitySession,
    hash_password,
    verify_password,
)
from core.inbox import NotificationInbox
from db.storage import SESSION_KEY, USERS_KEY
from utils.errors import NotAuthenticatedError, ValidationError

EMAIL = "alice@example.com"
PWD = "secret1"


class PasswordHashTestCase(unittest.TestCase):
    def test_hash_is_salted_and_verifies(self):
        h1, h2 = hash_password(PWD), hash_password(PWD)
        self.assertNotEqual(h1, PWD)
        self.assertNotEqual(h1, h2)
        self.assertTrue(verify_password(PWD, h1))
        self.assertFalse(verify_password("wrong", h1))

    def test_unrecognised_hash_does_not_verify(self):
        self.assertFalse(verify_password(PWD, PWD))
        self.assertFalse(verify_password(PWD, ""))


class IdentitySessionTestCase(StorageTestCase):
    async def asyncSetUp(self):
        self.session = IdentitySession(self.storage)
        await self.session.load()

    async def test_set_clear_and_persist(self):
        self.assertIsNone(self.session.identity)
        self.assertFalse(self.session.is_authenticated)

        await self.session.set(EMAIL)
        self.assertEqual(self.session.identity, EMAIL)
        self.assertEqual(await self.storage.read_json(SESSION_KEY), EMAIL)

        other = IdentitySession(self.storage)
        await other.load()
        self.assertEqual(other.identity, EMAIL)

        await self.session.clear()
        self.assertIsNone(self.session.identity)
        self.assertIsNone(await self.storage.get_item(SESSION_KEY))

    async def test_subscribers_are_notified(self):
        seen = []
        unsubscribe = self.session.subscribe(seen.append)

        await self.session.set(EMAIL)
        await self.session.clear()
        unsubscribe()
        await self.session.set("bob@example.com")

        self.assertEqual(seen, [EMAIL, None])

    async def test_sync_picks_up_changes_from_another_instance(self):
        other = IdentitySession(self.storage)
        await other.load()
        seen = []
        self.session.subscribe(seen.append)

        self.assertFalse(await self.session.sync())

        await other.set(EMAIL)
        self.assertTrue(await self.session.sync())
        self.assertEqual(self.session.identity, EMAIL)

        await other.clear()
        self.assertTrue(await self.session.sync())
        self.assertIsNone(self.session.identity)
        self.assertEqual(seen, [EMAIL, None])


class AccountServiceTestCase(StorageTestCase):
    async def asyncSetUp(self):
        self.inbox = NotificationInbox(self.storage)
        self.session = IdentitySession(self.storage)
        self.accounts = AccountService(self.storage, self.session, self.inbox)

    async def register_and_login(self):
        await self.accounts.register(EMAIL, PWD, PWD)
        await self.accounts.login(EMAIL, PWD)

    # ---------- Registration ----------

    async def test_register_stores_hash(self):
        await self.accounts.register(EMAIL, PWD, PWD)
        users = await self.storage.read_json(USERS_KEY)
        self.assertIn(EMAIL, users)
        self.assertNotEqual(users[EMAIL], PWD)
        self.assertEqual(
            self.inbox.notifications[0].message,
            f"Welcome to ShopVista, {EMAIL}! Your account is ready.",
        )
        # registering does not log in
        self.assertIsNone(self.session.identity)

    async def test_register_validation(self):
        cases = [
            ("", PWD, PWD, "Please fill in all fields."),
            (EMAIL, PWD, "other1", "Passwords do not match."),
            (EMAIL, "abc", "abc", "Password must be at least 6 characters long."),
        ]
        for email, pwd, confirm, message in cases:
            with self.subTest(message=message):
                with self.assertRaises(ValidationError) as ctx:
                    await self.accounts.register(email, pwd, confirm)
                self.assertEqual(ctx.exception.message, message)

        await self.accounts.register(EMAIL, PWD, PWD)
        with self.assertRaises(ValidationError):
            await self.accounts.register(EMAIL, PWD, PWD)

    # ---------- Login / logout ----------

    async def test_login_and_logout(self):
        await self.register_and_login()
        self.assertEqual(self.session.identity, EMAIL)
        self.assertEqual(
            self.inbox.notifications[0].message,
            f"Welcome back, {EMAIL}! Check out our new arrivals.",
        )

        await self.accounts.logout()
        self.assertIsNone(self.session.identity)
        self.assertEqual(self.inbox.notifications[0].message, f"{EMAIL} has been logged out.")

        # logging out twice adds nothing
        count = len(self.inbox.notifications)
        await self.accounts.logout()
        self.assertEqual(len(self.inbox.notifications), count)

    async def test_login_rejects_bad_credentials(self):
        await self.accounts.register(EMAIL, PWD, PWD)
        with self.assertRaises(NotAuthenticatedError):
            await self.accounts.login(EMAIL, "wrong-password")
        with self.assertRaises(NotAuthenticatedError):
            await self.accounts.login("nobody@example.com", PWD)
        with self.assertRaises(ValidationError):
            await self.accounts.login(EMAIL, "")
        self.assertIsNone(self.session.identity)

    # ---------- Password ----------

    async def test_change_password(self):
        await self.register_and_login()
        await self.accounts.change_password(PWD, "newpass1", "newpass1")
        await self.accounts.logout()

        with self.assertRaises(NotAuthenticatedError):
            await self.accounts.login(EMAIL, PWD)
        self.assertEqual(await self.accounts.login(EMAIL, "newpass1"), EMAIL)

    async def test_change_password_validation(self):
        with self.assertRaises(NotAuthenticatedError):
            await self.accounts.change_password(PWD, "newpass1", "newpass1")

        await self.register_and_login()
        cases = [
            ("", "newpass1", "newpass1"),
            ("wrong-pw", "newpass1", "newpass1"),
            (PWD, "abc", "abc"),
            (PWD, "newpass1", "newpass2"),
            (PWD, PWD, PWD),
        ]
        for current, new, confirm in cases:
            with self.subTest(new=new, confirm=confirm):
                with self.assertRaises(ValidationError):
                    await self.accounts.change_password(current, new, confirm)

    # ---------- Profile ----------

    async def test_profile(self):
        with self.assertRaises(NotAuthenticatedError):
            await self.accounts.get_profile()

        await self.register_and_login()
        profile = await self.accounts.get_profile()
        self.assertEqual(profile.name, "")

        await self.accounts.update_profile(" Alice ", "1 Main St", "555-0100")
        profile = await self.accounts.get_profile()
        self.assertEqual(profile.name, "Alice")
        self.assertEqual(profile.address, "1 Main St")
        self.assertEqual(profile.phone, "555-0100")

        with self.assertRaises(ValidationError):
            await self.accounts.update_profile("Alice", "", "555-0100")

    # ---------- Free trial ----------

    async def test_free_trial_signup_notifies(self):
        email = await self.accounts.start_free_trial("  guest@example.com ")
        self.assertEqual(email, "guest@example.com")
        self.assertEqual(len(self.inbox.notifications), 1)
        self.assertEqual(
            self.inbox.notifications[0].message,
            "Thanks for signing up, guest@example.com! Enjoy your free trial.",
        )
        # no account and no session come out of it
        self.assertIsNone(self.session.identity)
        with self.assertRaises(NotAuthenticatedError):
            await self.accounts.login("guest@example.com", PWD)

    async def test_free_trial_needs_an_email(self):
        for email in ("", "   ", None):
            with self.subTest(email=email):
                with self.assertRaises(ValidationError):
                    await self.accounts.start_free_trial(email)
        self.assertEqual(self.inbox.notifications, [])


if __name__ == "__main__":
    unittest.main()
