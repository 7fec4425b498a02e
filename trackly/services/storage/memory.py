"""In-memory blob store, used by tests and throwaway sessions."""

from typing import Optional

from trackly.services.storage.interface import BlobStoreInterface


class InMemoryBlobStore(BlobStoreInterface):
    """Keeps blobs in a dict for the lifetime of the object."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
