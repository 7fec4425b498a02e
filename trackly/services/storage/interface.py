"""
Abstract Storage Interface

DESIGN DECISION: Every persisted value is a string blob stored under a
logical key, the same shape as a platform key-value preferences file.
This allows us to:
1. Keep the Transaction Store and Preferences Store independent of files
2. Use in-memory storage for testing
3. Swap in another key-value backend without touching business logic

The interface is intentionally tiny - read, write, remove.
"""

from abc import ABC, abstractmethod
from typing import Optional


class BlobStoreInterface(ABC):
    """
    Abstract interface for a key-value blob store.

    Implementations must make `write` all-or-nothing for a single key:
    a reader never sees half of a blob.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under a key.

        Args:
            key: Logical key

        Returns:
            The stored blob, or None if the key was never written

        Raises:
            IOFailureError: If the underlying storage cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the blob stored under a key.

        Args:
            key: Logical key
            value: The complete new blob

        Raises:
            IOFailureError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is a no-op.

        Raises:
            IOFailureError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class MalformedRecordError(StorageError):
    """A stored or incoming record could not be decoded."""
    pass


class IOFailureError(StorageError):
    """Reading or writing a blob location failed for environmental reasons."""
    pass
