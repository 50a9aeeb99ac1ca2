"""
In-memory Persistence Layer

This module provides the key-value store abstraction used for sessions,
user profiles and notification records, plus the two stores built on it.
Everything lives in process memory and is lost on restart; swap
InMemoryStore for another KeyValueStore implementation to persist it.
"""

import base64
import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

import pytz
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from skybrief.db.dto import StoredTokens, UserProfile
from skybrief.exceptions import NotFoundError

logger = logging.getLogger(__name__)

V = TypeVar("V")


# ===================================================================
# STORE ABSTRACTION
# ===================================================================

class KeyValueStore(ABC, Generic[V]):
    """Minimal keyed storage interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[V]:
        """Return the value for ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: V) -> None:
        """Insert or replace the value for ``key``."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``; True when something was removed."""

    @abstractmethod
    def items(self) -> Iterator[Tuple[str, V]]:
        """Iterate over a snapshot of (key, value) pairs."""

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def values(self) -> List[V]:
        return [value for _, value in self.items()]

    def __len__(self) -> int:
        return sum(1 for _ in self.items())


class InMemoryStore(KeyValueStore[V]):
    """Dict-backed KeyValueStore."""

    def __init__(self):
        self._data: Dict[str, V] = {}

    def get(self, key: str) -> Optional[V]:
        return self._data.get(key)

    def set(self, key: str, value: V) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def items(self) -> Iterator[Tuple[str, V]]:
        return iter(list(self._data.items()))


# ===================================================================
# SESSION TOKENS
# ===================================================================

DEFAULT_ENCRYPTION_KEY = "your-secret-key-32-chars-long"
KEY_DERIVATION_SALT = b"skybrief-token-store"
KEY_DERIVATION_ITERATIONS = 100_000


def derive_fernet_key(passphrase: str) -> bytes:
    """Stretch a passphrase into a urlsafe base64 Fernet key (PBKDF2-SHA256)."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=KEY_DERIVATION_SALT,
        iterations=KEY_DERIVATION_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))


class TokenStore:
    """OAuth tokens keyed by session id, encrypted at rest with Fernet."""

    def __init__(self, store: Optional[KeyValueStore] = None, encryption_key: str = DEFAULT_ENCRYPTION_KEY):
        self.store = store if store is not None else InMemoryStore()
        self._fernet = Fernet(derive_fernet_key(encryption_key))

    @staticmethod
    def generate_session_id() -> str:
        """64 hex characters from 32 random bytes."""
        return secrets.token_hex(32)

    def _encrypt(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def _decrypt(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return self._fernet.decrypt(value.encode("ascii")).decode("utf-8")

    def store_tokens(
        self,
        session_id: str,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in: Optional[int] = None,
    ) -> StoredTokens:
        """Encrypt and store tokens; returns the plaintext record."""
        created_at = datetime.now(pytz.UTC)
        self.store.set(session_id, StoredTokens(
            access_token=self._encrypt(access_token),
            refresh_token=self._encrypt(refresh_token),
            expires_in=expires_in,
            created_at=created_at,
        ))
        return StoredTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            created_at=created_at,
        )

    def get_tokens(self, session_id: str) -> Optional[StoredTokens]:
        """
        Return the decrypted tokens for a session.

        Raises:
            cryptography.fernet.InvalidToken: the record was written under another key
        """
        if not session_id:
            return None
        encrypted = self.store.get(session_id)
        if encrypted is None:
            return None
        return encrypted.model_copy(update={
            "access_token": self._decrypt(encrypted.access_token),
            "refresh_token": self._decrypt(encrypted.refresh_token),
        })

    def remove_tokens(self, session_id: str) -> bool:
        return self.store.delete(session_id)

    def has_tokens(self, session_id: str) -> bool:
        return bool(session_id) and self.store.has(session_id)


# ===================================================================
# USER PROFILES
# ===================================================================

class UserStore:
    """User profiles keyed by session id."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else InMemoryStore()

    def create_user(self, session_id: str) -> UserProfile:
        """Create a profile with notifications enabled and a 60 minute advance notice."""
        user = UserProfile(session_id=session_id)
        self.store.set(session_id, user)
        logger.info(f"Created user profile for session {session_id}")
        return user

    def get_user(self, session_id: str) -> Optional[UserProfile]:
        return self.store.get(session_id)

    def update_user(self, session_id: str, **updates: Any) -> UserProfile:
        """
        Apply field updates to an existing profile.

        Args:
            session_id: Profile key
            **updates: UserProfile field names and new values

        Raises:
            NotFoundError: no profile for ``session_id``
        """
        existing = self.get_user(session_id)
        if existing is None:
            raise NotFoundError(f"User with session ID {session_id} not found")

        updated = existing.model_copy(update=updates)
        self.store.set(session_id, updated)
        return updated

    def delete_user(self, session_id: str) -> bool:
        return self.store.delete(session_id)

    def find_users_with_sms(self) -> List[UserProfile]:
        """Profiles with a phone number and notifications enabled."""
        return [
            user for user in self.store.values()
            if user.sms_phone_number and user.notification_preferences.enabled
        ]

    def has_user(self, session_id: str) -> bool:
        return self.store.has(session_id)
