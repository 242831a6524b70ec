"""Persisted session state."""

import json
import logging
import os
from typing import Any

from .consts import REMEMBER_ME_KEY, TOKEN_KEY, USER_KEY
from .exceptions import ConfigError
from .protocols import KeyValueStorage

logger = logging.getLogger("allocation-client.storage")


class MemoryStorage:
    """In-process key-value storage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class FileStorage:
    """Durable key-value storage backed by a JSON object in a single file.

    The file is re-read on every access so that several processes sharing a
    session file observe each other's logins and logouts.
    """

    def __init__(self, path: str):
        """Initialize FileStorage.

        Args:
            path: Location of the JSON file; ``~`` is expanded. The file and
                its directory are created on first write.
        """
        self.path = os.path.expanduser(path)

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = str(value)
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def clear(self) -> None:
        self._save({})

    def _load(self) -> dict[str, str]:
        try:
            with open(self.path) as f:
                items = json.load(f)
        except FileNotFoundError:
            return {}
        except PermissionError as e:
            raise ConfigError(
                f"Session storage file is not readable: {self.path}",
                suggestions=["Check file permissions"],
                context={"storage_path": self.path},
            ) from e
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in session storage file: {self.path}",
                errors=[f"JSON error: {e.msg}"],
                suggestions=["Delete the file to start a fresh session"],
                context={"storage_path": self.path},
            ) from e

        if not isinstance(items, dict):
            raise ConfigError(
                f"Session storage file must contain a JSON object: {self.path}",
                suggestions=["Delete the file to start a fresh session"],
                context={"storage_path": self.path},
            )
        return items

    def _save(self, items: dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, "w") as f:
                json.dump(items, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise ConfigError(
                f"Cannot write session storage file: {self.path}",
                errors=[str(e)],
                suggestions=["Check directory permissions"],
                context={"storage_path": self.path},
            ) from e


class SessionStore:
    """Typed view over the three persisted session keys.

    Responsibilities:
    - Read the access token and cached user profile
    - Record a login (token, user, remember-me flag)
    - Tear the session down, either narrowly or fully
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    @property
    def token(self) -> str | None:
        return self.storage.get_item(TOKEN_KEY)

    @property
    def user(self) -> dict[str, Any] | None:
        raw = self.storage.get_item(USER_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user profile is not valid JSON, ignoring it")
            return None

    @property
    def remember_me(self) -> bool:
        return self.storage.get_item(REMEMBER_ME_KEY) == "true"

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def save(
        self, token: str, user: dict[str, Any], remember_me: bool = False
    ) -> None:
        """Persist the result of a successful login."""
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(user))
        if remember_me:
            self.storage.set_item(REMEMBER_ME_KEY, "true")
        else:
            self.storage.remove_item(REMEMBER_ME_KEY)
        logger.info("Session saved")

    def update_user(self, **updates: Any) -> dict[str, Any] | None:
        """Merge profile updates into the stored user. No-op when logged out."""
        current = self.user
        if current is None:
            return None
        updated = {**current, **updates}
        self.storage.set_item(USER_KEY, json.dumps(updated))
        return updated

    def clear_expired(self) -> None:
        """Teardown used by the pre-flight expiry check: token and user only."""
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)

    def clear_all(self) -> None:
        """Full teardown: token, user and the remember-me flag."""
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(REMEMBER_ME_KEY)
