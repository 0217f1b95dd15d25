"""
Object storage system
Supports both local filesystem and S3-compatible storage
"""

from objectstore.storage.visibility import ObjectVisibility
from objectstore.storage.base import StorageBackend
from objectstore.storage.local import LocalStorage
from objectstore.storage.s3 import S3Storage
from objectstore.storage.signing import (
    HMACSignedURLBuilder,
    SignedURLBuilder,
    UnsupportedSignedURLBuilder,
)
from objectstore.storage.factory import get_storage_backend

__all__ = [
    "ObjectVisibility",
    "StorageBackend",
    "LocalStorage",
    "S3Storage",
    "SignedURLBuilder",
    "UnsupportedSignedURLBuilder",
    "HMACSignedURLBuilder",
    "get_storage_backend",
]
