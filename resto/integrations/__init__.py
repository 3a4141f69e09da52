"""External collaborators: document store, local storage, push delivery."""

from .document_store import DocumentStore, InMemoryDocumentStore, QuerySnapshot, StoredDocument
from .onesignal_push import OneSignalPushClient
from .redis_storage import KeyValueStorage, RedisKeyValueStorage

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "QuerySnapshot",
    "StoredDocument",
    "KeyValueStorage",
    "RedisKeyValueStorage",
    "OneSignalPushClient",
]
