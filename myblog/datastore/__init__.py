from .errors import Result, StoreError
from .store import DataStore, COLLECTIONS, like_pattern
from .gateway import AsyncDataStore, get_store
from .auth_client import AuthClient, AuthSession, Subscription
from .blob_storage import BlobStorage, get_blob_storage, POST_IMAGES_BUCKET, AVATARS_BUCKET

__all__ = [
    "Result",
    "StoreError",
    "DataStore",
    "COLLECTIONS",
    "like_pattern",
    "AsyncDataStore",
    "get_store",
    "AuthClient",
    "AuthSession",
    "Subscription",
    "BlobStorage",
    "get_blob_storage",
    "POST_IMAGES_BUCKET",
    "AVATARS_BUCKET",
]
