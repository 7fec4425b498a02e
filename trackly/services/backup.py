"""
Backup / Restore Manager

Copies the live transactions blob to an external destination and to an
internal fallback file, and validates then ingests blobs back into the
store.

DESIGN DECISION: Decode-then-commit. A candidate blob is fully decoded
before the live blob is touched, so a restore that fails is a no-op on
live data. Restore always replaces the whole collection - there is no
merge of live and backed-up records.

The backup file is byte-identical to the live blob; backup and restore
are pure copies, not format translations.
"""

import io
import os
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

import structlog

from trackly.audit import AuditLogger
from trackly.services.storage import (
    IOFailureError,
    MalformedRecordError,
    TransactionStore,
    decode_collection,
    is_empty_blob,
    read_bytes,
    write_bytes_atomic,
)


logger = structlog.get_logger(__name__)

# A caller-supplied location: a filesystem path or an open stream
ExternalTarget = Union[str, os.PathLike, BinaryIO, TextIO]


class BackupError(Exception):
    """Base exception for backup and restore operations."""
    pass


class NothingToBackUpError(BackupError):
    """The store holds no transactions worth backing up."""
    pass


class NoBackupFoundError(BackupError):
    """The internal fallback has never been written."""
    pass


class InvalidBackupError(BackupError):
    """Candidate restore content is empty or cannot be decoded."""
    pass


def _describe(target: ExternalTarget) -> str:
    if isinstance(target, (str, os.PathLike)):
        return str(target)
    return getattr(target, "name", None) or type(target).__name__


class BackupManager:
    """
    Backup to / restore from external files and the internal fallback.

    GUARANTEES:
    - No file is written when there is nothing to back up
    - A failed restore never modifies the live blob
    - External I/O faults surface as IOFailureError, never raw OSError
    """

    def __init__(
        self,
        store: TransactionStore,
        fallback_path: Path,
        audit_logger: Optional[AuditLogger] = None,
        retry_attempts: int = 3,
    ):
        self._store = store
        self._fallback_path = Path(fallback_path)
        self._audit_logger = audit_logger
        self._retry_attempts = retry_attempts

    @property
    def fallback_path(self) -> Path:
        return self._fallback_path

    def has_internal_backup(self) -> bool:
        return self._fallback_path.exists()

    # === External I/O ===

    def _write_external(self, destination: ExternalTarget, data: bytes) -> None:
        try:
            if isinstance(destination, (str, os.PathLike)):
                with open(destination, "wb") as f:
                    f.write(data)
            else:
                if isinstance(destination, io.TextIOBase):
                    destination.write(data.decode("utf-8"))
                else:
                    destination.write(data)
                destination.flush()
        except (OSError, TypeError, ValueError) as e:
            # TypeError/ValueError: wrong stream mode or a closed stream
            logger.error("backup_destination_failed", destination=_describe(destination), error=str(e))
            raise IOFailureError(f"Could not write backup to {_describe(destination)}: {e}") from e

    def _read_external(self, source: ExternalTarget) -> bytes:
        try:
            if isinstance(source, (str, os.PathLike)):
                with open(source, "rb") as f:
                    return f.read()
            data = source.read()
        except (OSError, ValueError) as e:
            logger.error("restore_source_failed", source=_describe(source), error=str(e))
            raise IOFailureError(f"Could not read backup from {_describe(source)}: {e}") from e

        if isinstance(data, str):
            return data.encode("utf-8", "surrogatepass")
        if not isinstance(data, bytes):
            raise IOFailureError(f"Could not read backup from {_describe(source)}: not a readable stream")
        return data

    def _write_fallback(self, data: bytes) -> bool:
        """Write the internal fallback; failures are logged, not raised."""
        try:
            write_bytes_atomic(self._fallback_path, data, attempts=self._retry_attempts)
            return True
        except IOFailureError as e:
            if self._audit_logger:
                self._audit_logger.log_backup_fallback_failed(str(self._fallback_path), str(e))
            else:
                logger.error("backup_fallback_failed", path=str(self._fallback_path), error=str(e))
            return False

    # === Validation ===

    def _validate(self, data: bytes, source: str) -> tuple[str, int]:
        """
        Decode candidate content without touching live data.

        Returns:
            (blob_text, record_count)
        """
        try:
            blob = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise self._rejection(source, f"not UTF-8 text: {e}") from e

        if is_empty_blob(blob):
            raise self._rejection(source, "backup is empty")

        try:
            transactions = decode_collection(blob)
        except MalformedRecordError as e:
            raise self._rejection(source, str(e)) from e

        return blob, len(transactions)

    def _rejection(self, source: str, reason: str) -> InvalidBackupError:
        if self._audit_logger:
            self._audit_logger.log_restore_rejected(source, reason)
        return InvalidBackupError(f"Backup from {source} is invalid: {reason}")

    # === Operations ===

    def backup_to_destination(self, destination: ExternalTarget) -> int:
        """
        Write the live blob to `destination`, then to the internal fallback.

        Returns:
            Number of bytes written

        Raises:
            NothingToBackUpError: If the store is empty (nothing is written)
            IOFailureError: If the destination cannot be written
        """
        blob = self._store.raw_blob()
        if is_empty_blob(blob):
            if self._audit_logger:
                self._audit_logger.log_backup_refused("no transactions to back up")
            raise NothingToBackUpError("No transactions to back up")

        data = blob.encode("utf-8")
        self._write_external(destination, data)
        # The external copy is the primary result; the fallback is best effort
        self._write_fallback(data)

        if self._audit_logger:
            self._audit_logger.log_backup_created(_describe(destination), len(data))
        return len(data)

    def restore_from_internal_fallback(self) -> int:
        """
        Replace live transactions with the internal fallback copy.

        Returns:
            Number of restored transactions

        Raises:
            NoBackupFoundError: If the fallback was never written
            InvalidBackupError: If the fallback content is empty or corrupt
            IOFailureError: If the fallback cannot be read
        """
        data = read_bytes(self._fallback_path)
        if data is None:
            raise NoBackupFoundError("No backup found to restore")

        blob, count = self._validate(data, "internal backup")
        self._store.replace_raw_blob(blob)

        if self._audit_logger:
            self._audit_logger.log_restore_completed("internal backup", count)
        return count

    def restore_from_external_source(self, source: ExternalTarget) -> int:
        """
        Replace live transactions with the content of `source`.

        A successful restore also becomes the new internal fallback.

        Returns:
            Number of restored transactions

        Raises:
            InvalidBackupError: If the content is empty or corrupt
            IOFailureError: If the source cannot be read
        """
        description = _describe(source)
        data = self._read_external(source)

        blob, count = self._validate(data, description)
        self._store.replace_raw_blob(blob)
        self._write_fallback(data)

        if self._audit_logger:
            self._audit_logger.log_restore_completed(description, count)
        return count
