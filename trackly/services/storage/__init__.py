"""
Storage Services Package

Provides the blob store interface, local-file and in-memory backends,
the transaction record codec, and the two stores built on top of them.
"""

from trackly.services.storage.interface import (
    BlobStoreInterface,
    IOFailureError,
    MalformedRecordError,
    StorageError,
)
from trackly.services.storage.codec import (
    EMPTY_COLLECTION,
    decode_collection,
    decode_transaction,
    encode_collection,
    encode_transaction,
    is_empty_blob,
)
from trackly.services.storage.local_file import (
    JsonFileBlobStore,
    read_bytes,
    write_bytes_atomic,
)
from trackly.services.storage.memory import InMemoryBlobStore
from trackly.services.storage.preferences import PreferencesStore
from trackly.services.storage.transactions import TransactionStore

__all__ = [
    # Interface
    "BlobStoreInterface",
    # Exceptions
    "IOFailureError",
    "MalformedRecordError",
    "StorageError",
    # Codec
    "EMPTY_COLLECTION",
    "decode_collection",
    "decode_transaction",
    "encode_collection",
    "encode_transaction",
    "is_empty_blob",
    # Backends
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "read_bytes",
    "write_bytes_atomic",
    # Stores
    "PreferencesStore",
    "TransactionStore",
]
