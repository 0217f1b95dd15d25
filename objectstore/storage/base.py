"""
Abstract base class for storage backends
Defines the interface for object storage systems (local, S3, etc.)

All object paths are relative to the root location configured for each
implementation.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import BinaryIO, List, Union

from objectstore.schemas.storage import ObjectInfo
from objectstore.storage.visibility import ObjectVisibility

PutSource = Union[bytes, str, BinaryIO]


class StorageBackend(ABC):
    """Abstract base class for object storage backends"""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend identifier used in log lines ("local", "s3")"""
        pass

    @abstractmethod
    def list(self, object_dir: str) -> List[ObjectInfo]:
        """
        List files and directories directly inside object_dir (one level)

        Args:
            object_dir: Directory-like object path ("" or "/" for the root)

        Returns:
            List[ObjectInfo]: Entries with paths relative to object_dir

        Raises:
            NotSupportedError: If the backend cannot list
        """
        pass

    @abstractmethod
    def read(self, object_path: str) -> BinaryIO:
        """
        Open a stream positioned at the start of the object

        The caller owns the stream and must close it.

        Raises:
            ObjectNotFoundError: If the object does not exist
        """
        pass

    @abstractmethod
    def put(
        self,
        object_path: str,
        source: PutSource,
        visibility: Union[ObjectVisibility, str] = ObjectVisibility.PRIVATE
    ):
        """
        Store source at object_path with the given visibility

        Overwrites any existing object. Intermediate directories are implied.

        Args:
            object_path: Destination path
            source: Bytes, text (stored as UTF-8) or a binary file object
            visibility: Visibility established as part of the write

        Raises:
            InvalidVisibilityError: If visibility is not a canonical value
        """
        pass

    @abstractmethod
    def delete(self, *object_paths: str):
        """
        Delete objects; missing objects are not an error

        Args:
            *object_paths: Zero or more object paths
        """
        pass

    @abstractmethod
    def copy(self, src_object_path: str, dst_object_path: str):
        """
        Copy object content to a new path

        Destination visibility is backend defined unless the backend was
        built with preserve_visibility_on_copy=True.

        Raises:
            ObjectNotFoundError: If the source does not exist
        """
        pass

    @abstractmethod
    def url(self, object_path: str) -> str:
        """
        Get the stable, unsigned URL of a public object

        Returns:
            str: URL, or "" for an empty path
        """
        pass

    @abstractmethod
    def temporary_url(self, object_path: str, expire_in: timedelta) -> str:
        """
        Get a time-bounded signed URL granting read access

        Returns:
            str: Signed URL, or "" for an empty path
        """
        pass

    @abstractmethod
    def size(self, object_path: str) -> int:
        """Object size in bytes (ObjectNotFoundError if absent)"""
        pass

    @abstractmethod
    def last_modified(self, object_path: str) -> datetime:
        """Timezone-aware last modification time (ObjectNotFoundError if absent)"""
        pass

    @abstractmethod
    def exists(self, object_path: str) -> bool:
        """
        Check whether a (non-directory) object exists

        Returns:
            bool: False for missing objects and for directories
        """
        pass

    @abstractmethod
    def set_visibility(self, object_path: str, visibility: Union[ObjectVisibility, str]):
        """
        Change visibility without touching content

        Raises:
            InvalidVisibilityError: If visibility is not a canonical value
            ObjectNotFoundError: If the object does not exist
        """
        pass

    @abstractmethod
    def get_visibility(self, object_path: str) -> ObjectVisibility:
        """
        Get current visibility

        Raises:
            ObjectNotFoundError: If the object does not exist
        """
        pass

    def read_bytes(self, object_path: str) -> bytes:
        """Read the whole object and close the stream"""
        with self.read(object_path) as stream:
            return stream.read()
