"""
Custom exceptions for objectstore
"""

from typing import Optional, List, Dict, Any


class StorageError(Exception):
    """Base exception for storage operations"""

    def __init__(self, message: str, object_path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.object_path = object_path

    def __str__(self) -> str:
        if self.object_path:
            return f"{self.message}: {self.object_path}"
        return self.message


class ObjectNotFoundError(StorageError):
    """Object absent where presence is required"""

    def __init__(self, object_path: Optional[str] = None, message: str = "Object not found"):
        super().__init__(message, object_path=object_path)


class PathTraversalError(StorageError):
    """Object path resolves outside the configured root"""

    def __init__(self, object_path: Optional[str] = None, message: str = "Invalid object path"):
        super().__init__(message, object_path=object_path)


class InvalidVisibilityError(StorageError):
    """Visibility value outside private / public-read / public-read-write"""

    def __init__(self, visibility: Any, object_path: Optional[str] = None):
        super().__init__(f"Invalid object visibility {visibility!r}", object_path=object_path)
        self.visibility = visibility


class UnknownACLError(StorageError):
    """Remote ACL that does not map to a canonical visibility"""

    def __init__(self, grants: List[Dict[str, Any]], object_path: Optional[str] = None):
        super().__init__("Unrecognized object ACL", object_path=object_path)
        self.grants = grants


class NotSupportedError(StorageError):
    """Operation not implementable by this backend"""
    pass


class UnsupportedError(StorageError):
    """Capability not configured (e.g. no signed URL builder)"""
    pass


class UnderlyingStorageError(StorageError):
    """Filesystem or SDK failure passed through to the caller"""

    def __init__(
        self,
        message: str,
        object_path: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message, object_path=object_path)
        self.cause = cause


class StorageConfigurationError(StorageError):
    """Backend cannot be built from its configuration (fatal)"""
    pass
