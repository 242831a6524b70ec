"""Protocol definitions for dependency injection and interface contracts."""

from typing import Protocol


class KeyValueStorage(Protocol):
    """Protocol for durable string key-value stores holding session state."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        ...

    def clear(self) -> None: ...


class Translator(Protocol):
    """Protocol for message lookup functions."""

    def __call__(self, key: str) -> str:
        """Translate a message key such as ``common:errors.networkError``."""
        ...
