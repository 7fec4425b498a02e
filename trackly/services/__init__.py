"""Services package."""

from trackly.services.backup import (
    BackupError,
    BackupManager,
    InvalidBackupError,
    NoBackupFoundError,
    NothingToBackUpError,
)
from trackly.services.budget import AlertHandler, BudgetNotifier
from trackly.services.storage import (
    BlobStoreInterface,
    InMemoryBlobStore,
    IOFailureError,
    JsonFileBlobStore,
    MalformedRecordError,
    PreferencesStore,
    StorageError,
    TransactionStore,
)

__all__ = [
    # Backup / restore
    "BackupError",
    "BackupManager",
    "InvalidBackupError",
    "NoBackupFoundError",
    "NothingToBackUpError",
    # Budget
    "AlertHandler",
    "BudgetNotifier",
    # Storage services
    "BlobStoreInterface",
    "InMemoryBlobStore",
    "IOFailureError",
    "JsonFileBlobStore",
    "MalformedRecordError",
    "PreferencesStore",
    "StorageError",
    "TransactionStore",
]
