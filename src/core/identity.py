from __future__ import annotations

from typing import Callable, Dict, List, Optional

from passlib.context import CryptContext

from core.inbox import NotificationInbox
from db.models import UserProfile
from db.storage import PROFILES_KEY, SESSION_KEY, USERS_KEY, LocalStorage
from utils.errors import NotAuthenticatedError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6

# salted hashes; pbkdf2 keeps us free of native bcrypt builds
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

IdentityListener = Callable[[Optional[str]], None]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # not a hash we recognise, e.g. a legacy cleartext entry
        return False


class IdentitySession:
    """
    The single current-user identity (an email), persisted in local storage.

    Other app instances sharing the storage file may change it behind our
    back. sync() picks such a change up and notifies subscribers; there is no
    conflict resolution, the last writer wins.
    """

    def __init__(self, storage: LocalStorage):
        self._storage = storage
        self._identity: Optional[str] = None
        self._listeners: List[IdentityListener] = []

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    async def _read(self) -> Optional[str]:
        value = await self._storage.read_json(SESSION_KEY)
        return value if isinstance(value, str) and value else None

    async def load(self) -> None:
        self._identity = await self._read()

    async def set(self, identity: str) -> None:
        await self._storage.write_json(SESSION_KEY, identity)
        self._change(identity)

    async def clear(self) -> None:
        await self._storage.remove_item(SESSION_KEY)
        self._change(None)

    async def sync(self) -> bool:
        """Adopt the stored identity if it differs. Returns True if it did."""
        stored = await self._read()
        if stored == self._identity:
            return False
        _logger.info(f"Session changed outside this app: {self._identity} -> {stored}")
        self._change(stored)
        return True

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Call `listener(identity)` on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _change(self, identity: Optional[str]) -> None:
        self._identity = identity
        for listener in list(self._listeners):
            listener(identity)


class AccountService:
    """register / login / logout, password changes and the per-user profile"""

    def __init__(
        self,
        storage: LocalStorage,
        session: IdentitySession,
        inbox: NotificationInbox,
    ):
        self._storage = storage
        self._session = session
        self._inbox = inbox

    async def _users(self) -> Dict[str, str]:
        users = await self._storage.read_json(USERS_KEY, {})
        return users if isinstance(users, dict) else {}

    async def _profiles(self) -> Dict[str, dict]:
        profiles = await self._storage.read_json(PROFILES_KEY, {})
        return profiles if isinstance(profiles, dict) else {}

    def _require_identity(self, action: str) -> str:
        if not self._session.identity:
            raise NotAuthenticatedError(f"You must be logged in to {action}.")
        return self._session.identity

    async def register(self, email: str, password: str, confirm_password: str) -> None:
        email = (email or "").strip()
        if not email or not password or not confirm_password:
            raise ValidationError("Please fill in all fields.")
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

        users = await self._users()
        if email in users:
            raise ValidationError("An account with this email already exists.")
        users[email] = hash_password(password)
        await self._storage.write_json(USERS_KEY, users)

        _logger.info(f"Registered {email}")
        await self._inbox.add(f"Welcome to ShopVista, {email}! Your account is ready.")

    async def login(self, email: str, password: str) -> str:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Please enter both email and password.")

        users = await self._users()
        hashed = users.get(email)
        if not hashed or not verify_password(password, hashed):
            _logger.info(f"Failed login for {email}")
            raise NotAuthenticatedError("Invalid email or password.")

        await self._session.set(email)
        await self._inbox.add(f"Welcome back, {email}! Check out our new arrivals.")
        return email

    async def logout(self) -> None:
        identity = self._session.identity
        if identity is None:
            return
        await self._session.clear()
        await self._inbox.add(f"{identity} has been logged out.")

    async def change_password(
        self, current_password: str, new_password: str, confirm_password: str
    ) -> None:
        identity = self._require_identity("change your password")
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("Please fill all password fields.")

        users = await self._users()
        if not verify_password(current_password, users.get(identity, "")):
            raise ValidationError("Current password is incorrect.")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )
        if new_password != confirm_password:
            raise ValidationError("New password and confirmation do not match.")
        if new_password == current_password:
            raise ValidationError("New password cannot be the same as the current password.")

        users[identity] = hash_password(new_password)
        await self._storage.write_json(USERS_KEY, users)
        await self._inbox.add("Your password was changed.")

    async def get_profile(self) -> UserProfile:
        identity = self._require_identity("view your profile")
        profiles = await self._profiles()
        stored = profiles.get(identity)
        return UserProfile.from_dict(stored) if isinstance(stored, dict) else UserProfile()

    async def update_profile(self, name: str, address: str, phone: str) -> UserProfile:
        identity = self._require_identity("update your profile")
        profile = UserProfile(
            name=(name or "").strip(),
            address=(address or "").strip(),
            phone=(phone or "").strip(),
        )
        if not profile.name or not profile.address or not profile.phone:
            raise ValidationError("Please fill in all profile fields.")

        profiles = await self._profiles()
        existing = profiles.get(identity)
        merged = dict(existing) if isinstance(existing, dict) else {}
        merged.update(profile.to_dict())
        profiles[identity] = merged
        await self._storage.write_json(PROFILES_KEY, profiles)
        return profile

    async def start_free_trial(self, email: str) -> str:
        """
        Sign `email` up for the free trial. Nothing is stored beyond the inbox
        notification, and no login is needed.
        """
        email = (email or "").strip()
        if not email:
            raise ValidationError("Please enter your email address.")
        _logger.info(f"Free trial started for {email}")
        await self._inbox.add(f"Thanks for signing up, {email}! Enjoy your free trial.")
        return email
