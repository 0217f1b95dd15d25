"""
objectstore
Uniform object storage over a local filesystem or an S3-compatible service
"""

from objectstore.core.exceptions import (
    StorageError,
    ObjectNotFoundError,
    PathTraversalError,
    InvalidVisibilityError,
    UnknownACLError,
    NotSupportedError,
    UnsupportedError,
    UnderlyingStorageError,
    StorageConfigurationError,
)
from objectstore.schemas.storage import ObjectInfo
from objectstore.storage import (
    ObjectVisibility,
    StorageBackend,
    LocalStorage,
    S3Storage,
    SignedURLBuilder,
    UnsupportedSignedURLBuilder,
    HMACSignedURLBuilder,
    get_storage_backend,
)

__version__ = "0.1.0"

__all__ = [
    "StorageError",
    "ObjectNotFoundError",
    "PathTraversalError",
    "InvalidVisibilityError",
    "UnknownACLError",
    "NotSupportedError",
    "UnsupportedError",
    "UnderlyingStorageError",
    "StorageConfigurationError",
    "ObjectInfo",
    "ObjectVisibility",
    "StorageBackend",
    "LocalStorage",
    "S3Storage",
    "SignedURLBuilder",
    "UnsupportedSignedURLBuilder",
    "HMACSignedURLBuilder",
    "get_storage_backend",
]
