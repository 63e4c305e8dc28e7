"""
Domain service for user registration, login and session tokens.

Tokens are opaque random strings stored server-side with an expiry; the
borrowing service only ever sees the user id they resolve to.
"""

import logging
import re
import secrets
from datetime import datetime, timedelta, UTC
from typing import Callable, Optional

from library_backend.domain.entities import Session, User
from library_backend.domain.errors import (
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
    PhoneNumberTaken,
)
from library_backend.domain.ports import LibraryStore
from library_backend.domain.utils import generate_salt, hash_password, verify_password

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"09\d{8}")
MIN_PASSWORD_LENGTH = 6
USER_NAME_LENGTH = (2, 20)
DEFAULT_SESSION_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IdentityService:
    """
    Registers users, issues session tokens and resolves tokens to user ids.

    Usage:
        identity = IdentityService(store=sqlite_store)
        user = identity.register("0912345678", "secret1", "Alice")
        session = identity.login("0912345678", "secret1")
        user_id = identity.authenticate(session.token)
    """

    def __init__(
        self,
        store: LibraryStore,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            store: Transactional access to users and sessions
            session_ttl: Lifetime of a newly issued token
            clock: Source of "now" (defaults to UTC wall clock)
        """
        if session_ttl <= timedelta(0):
            raise ValueError(f"session_ttl must be positive, got {session_ttl}")

        self._store = store
        self._session_ttl = session_ttl
        self._clock = clock or _utcnow

    def register(self, phone_number: str, password: str, user_name: str) -> User:
        """
        Register a new user.

        Raises:
            InvalidInput: If any field is blank or malformed
            PhoneNumberTaken: If the phone number is already registered
        """
        self._validate_registration(phone_number, password, user_name)

        salt = generate_salt()
        user = User(
            user_id=None,
            phone_number=phone_number,
            user_name=user_name.strip(),
            password_hash=hash_password(password, salt),
            salt=salt,
            registered_at=self._clock(),
        )

        with self._store.write() as tx:
            if tx.users.get_by_phone(phone_number) is not None:
                logger.warning("Registration failed: phone number already registered")
                raise PhoneNumberTaken()
            try:
                user = tx.users.add(user)
            except ValueError as e:
                raise PhoneNumberTaken() from e

        logger.info(f"User registered: user_id={user.user_id}")
        return user

    def login(self, phone_number: str, password: str) -> Session:
        """
        Verify credentials and issue a new session token.

        Unknown phone numbers and wrong passwords raise the same error.

        Raises:
            InvalidInput: If phone number or password is blank
            InvalidCredentials: If the credentials do not match a user
        """
        if not phone_number or not phone_number.strip():
            raise InvalidInput("Phone number cannot be empty")
        if not password or not password.strip():
            raise InvalidInput("Password cannot be empty")

        now = self._clock()
        with self._store.write() as tx:
            user = tx.users.get_by_phone(phone_number)
            if user is None or not verify_password(password, user.salt, user.password_hash):
                logger.warning("Login failed: invalid credentials")
                raise InvalidCredentials()

            session = Session(
                token=secrets.token_urlsafe(32),
                user_id=user.user_id,
                issued_at=now,
                expires_at=now + self._session_ttl,
            )
            tx.sessions.add(session)
            tx.users.touch_login(user.user_id, now)

        logger.info(f"User logged in: user_id={user.user_id}")
        return session

    def logout(self, token: str) -> bool:
        """Revoke a token. Returns True if the token existed."""
        with self._store.write() as tx:
            removed = tx.sessions.delete(token)
        if removed:
            logger.info("Session revoked")
        return removed

    def authenticate(self, token: Optional[str]) -> int:
        """
        Resolve a session token to a user id.

        Raises:
            InvalidToken: If the token is missing, unknown or expired
        """
        if not token:
            raise InvalidToken("Missing token")

        with self._store.read() as tx:
            session = tx.sessions.get(token)

        if session is None:
            raise InvalidToken()

        if session.is_expired(self._clock()):
            raise InvalidToken("Token has expired")

        return session.user_id

    def get_user(self, user_id: int) -> Optional[User]:
        with self._store.read() as tx:
            return tx.users.get(user_id)

    def purge_expired_sessions(self) -> int:
        """Delete expired tokens. Returns the number removed."""
        with self._store.write() as tx:
            removed = tx.sessions.delete_expired(self._clock())
        logger.debug(f"Purged {removed} expired sessions")
        return removed

    @staticmethod
    def _validate_registration(phone_number: str, password: str, user_name: str) -> None:
        if not phone_number or not phone_number.strip():
            raise InvalidInput("Phone number cannot be empty")
        if not password or not password.strip():
            raise InvalidInput("Password cannot be empty")
        if not user_name or not user_name.strip():
            raise InvalidInput("User name cannot be empty")

        if not PHONE_PATTERN.fullmatch(phone_number):
            raise InvalidInput("Phone number must be 10 digits starting with 09")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        min_len, max_len = USER_NAME_LENGTH
        if not (min_len <= len(user_name.strip()) <= max_len):
            raise InvalidInput(f"User name must be between {min_len} and {max_len} characters")
