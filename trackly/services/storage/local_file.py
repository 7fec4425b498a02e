"""
Local File Storage Implementation

DESIGN DECISION: Blobs live in small JSON files on the local disk, one
file per logical store (transactions, preferences). Each file is a flat
JSON object mapping key -> blob string.

TRADEOFFS:
- Every write rewrites the whole file (fine for personal-use volumes)
- No locking: a single local process is assumed
- Writes are atomic (temp file + rename), so a crash mid-write leaves
  the previous version intact

Transient OS errors (e.g. a briefly locked file on a synced folder) are
retried a few times before they surface as IOFailureError.
"""

import json
import os
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from trackly.services.storage.interface import (
    BlobStoreInterface,
    IOFailureError,
)


logger = structlog.get_logger(__name__)


def _retrying(attempts: int) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.05, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )


def write_bytes_atomic(path: Path, data: bytes, attempts: int = 3) -> None:
    """
    Write `data` to `path` atomically, retrying transient OS errors.

    Raises:
        IOFailureError: If every attempt failed
    """
    try:
        for attempt in _retrying(attempts):
            with attempt:
                path.parent.mkdir(parents=True, exist_ok=True)
                temp_path = path.with_name(path.name + ".tmp")
                with open(temp_path, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                temp_path.replace(path)
    except OSError as e:
        logger.error("file_write_failed", path=str(path), error=str(e))
        raise IOFailureError(f"Failed to write {path}: {e}") from e


def read_bytes(path: Path) -> Optional[bytes]:
    """
    Read a whole file.

    Returns:
        The file contents, or None if the file does not exist

    Raises:
        IOFailureError: If the file exists but cannot be read
    """
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.error("file_read_failed", path=str(path), error=str(e))
        raise IOFailureError(f"Failed to read {path}: {e}") from e


class JsonFileBlobStore(BlobStoreInterface):
    """
    Key-value blob store backed by one JSON file.

    The file is re-read on every call; there is no in-memory cache.
    """

    def __init__(self, path: Path, retry_attempts: int = 3):
        self._path = Path(path)
        self._retry_attempts = retry_attempts

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        raw = read_bytes(self._path)
        if raw is None or not raw.strip():
            return {}
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise IOFailureError(f"Key-value file is corrupt: {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise IOFailureError(f"Key-value file is not an object: {self._path}")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
        write_bytes_atomic(self._path, payload, attempts=self._retry_attempts)

    def read(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        if value is not None and not isinstance(value, str):
            raise IOFailureError(f"Value under '{key}' is not a string blob")
        return value

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)
        logger.debug("blob_written", path=str(self._path), key=key, size=len(value))

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)
