"""
Local file storage with private/public directory trees
Implements StorageBackend interface for the local filesystem

Every object lives under base_dir. An object is public when a hard link to the
same file exists at the same relative path under public_base_dir, so a web
server can expose public_base_dir directly. Writes rewrite the private file in
place, which keeps the public link pointing at current content.
"""

import errno
import logging
import os
import posixpath
import shutil
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import BinaryIO, List, Optional, Union
from urllib.parse import quote, urlsplit, urlunsplit

from objectstore.core.exceptions import (
    ObjectNotFoundError,
    StorageError,
    UnderlyingStorageError,
)
from objectstore.schemas.storage import ObjectInfo
from objectstore.storage.base import PutSource, StorageBackend
from objectstore.storage.paths import normalize_object_path, safe_join
from objectstore.storage.signing import SignedURLBuilder, UnsupportedSignedURLBuilder
from objectstore.storage.visibility import ObjectVisibility

logger = logging.getLogger(__name__)

# os.link failures that mean "this filesystem cannot hard link here"
_NO_HARD_LINK_ERRNOS = {
    errno.EXDEV,
    errno.EPERM,
    errno.EMLINK,
    getattr(errno, "ENOTSUP", errno.EOPNOTSUPP),
    errno.EOPNOTSUPP,
}


@contextmanager
def _os_errors(object_path: str):
    """Translate OSError into storage errors"""
    try:
        yield
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
        raise ObjectNotFoundError(object_path) from e
    except OSError as e:
        logger.error(f"Local storage operation failed for {object_path}: {e}")
        raise UnderlyingStorageError(str(e), object_path=object_path, cause=e) from e


def _reads_from(source: PutSource, file_path: Path) -> bool:
    """True if source is an open stream on file_path itself"""
    try:
        return os.path.samestat(os.fstat(source.fileno()), file_path.stat())
    except (AttributeError, OSError, ValueError):
        return False


def _write_source(file_path: Path, source: PutSource):
    """Write source into file_path, truncating in place (inode is kept)"""
    # Truncating first would wipe a stream opened on the same file
    if _reads_from(source, file_path):
        source = source.read()

    with open(file_path, "wb") as f:
        if isinstance(source, str):
            f.write(source.encode("utf-8"))
        elif isinstance(source, (bytes, bytearray, memoryview)):
            f.write(source)
        else:
            shutil.copyfileobj(source, f)


class LocalStorage(StorageBackend):
    """Local file storage publishing objects through hard links"""

    def __init__(
        self,
        base_dir: Union[str, Path],
        public_base_dir: Union[str, Path],
        public_base_url: str,
        signed_url_builder: Optional[SignedURLBuilder] = None,
        preserve_visibility_on_copy: bool = False
    ):
        """
        Initialize local storage backend

        Args:
            base_dir: Private root, holds every object
            public_base_dir: Public root, holds hard links of public objects
            public_base_url: URL prefix under which public_base_dir is served
            signed_url_builder: Builds temporary URLs (unsupported if omitted)
            preserve_visibility_on_copy: Copy source visibility to the destination
        """
        self.base_dir = Path(base_dir).resolve()
        self.public_base_dir = Path(public_base_dir).resolve()
        self.public_base_url = public_base_url
        self.signed_url_builder = signed_url_builder or UnsupportedSignedURLBuilder()
        self.preserve_visibility_on_copy = preserve_visibility_on_copy

        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def backend_name(self) -> str:
        return "local"

    def _private_path(self, object_path: str) -> Path:
        return safe_join(self.base_dir, object_path)

    def _public_path(self, object_path: str) -> Path:
        return safe_join(self.public_base_dir, object_path)

    def _publish(self, object_path: str):
        """Create or replace the public hard link of an object"""
        private_path = self._private_path(object_path)
        public_path = self._public_path(object_path)
        public_path.parent.mkdir(parents=True, exist_ok=True)

        # Link under a unique name, then swap it in atomically
        tmp_path = public_path.parent / f".{public_path.name}.{uuid.uuid4().hex}.tmp"
        try:
            try:
                os.link(private_path, tmp_path)
            except OSError as e:
                if e.errno not in _NO_HARD_LINK_ERRNOS:
                    raise
                # Copy is refreshed on every public put()
                logger.warning(f"Hard link unavailable for {object_path} ({e}), publishing a copy")
                shutil.copyfile(private_path, tmp_path)
            os.replace(tmp_path, public_path)
        finally:
            tmp_path.unlink(missing_ok=True)

    def _unpublish(self, object_path: str):
        self._public_path(object_path).unlink(missing_ok=True)

    def list(self, object_dir: str) -> List[ObjectInfo]:
        """List entries directly under object_dir in the private tree"""
        dir_path = self._private_path(object_dir)
        if not dir_path.is_dir():
            raise ObjectNotFoundError(object_dir)

        with _os_errors(object_dir):
            with os.scandir(dir_path) as entries:
                result = [
                    ObjectInfo(object_path=entry.name, is_dir=entry.is_dir())
                    for entry in entries
                ]

        return sorted(result, key=lambda info: info.object_path)

    def read(self, object_path: str) -> BinaryIO:
        with _os_errors(object_path):
            return open(self._private_path(object_path), "rb")

    def put(
        self,
        object_path: str,
        source: PutSource,
        visibility: Union[ObjectVisibility, str] = ObjectVisibility.PRIVATE
    ):
        """Write to the private tree, then publish or unpublish"""
        visibility = ObjectVisibility.parse(visibility, object_path)
        file_path = self._private_path(object_path)
        if file_path == self.base_dir:
            raise StorageError("Object path is empty", object_path=object_path)

        with _os_errors(object_path):
            file_path.parent.mkdir(parents=True, exist_ok=True)
            _write_source(file_path, source)

            if visibility.is_public:
                self._publish(object_path)
            else:
                self._unpublish(object_path)

        logger.debug(f"Stored local object {object_path} ({visibility.value})")

    def delete(self, *object_paths: str):
        """Remove objects from both trees, ignoring missing ones"""
        for object_path in object_paths:
            if not normalize_object_path(object_path):
                continue

            with _os_errors(object_path):
                for file_path in (self._public_path(object_path), self._private_path(object_path)):
                    if file_path.is_file():
                        file_path.unlink(missing_ok=True)

            logger.debug(f"Deleted local object {object_path}")

    def copy(self, src_object_path: str, dst_object_path: str):
        """
        Copy content into a new private file

        The destination is private unless preserve_visibility_on_copy is set,
        in which case it takes the source's visibility.
        """
        if not self.exists(src_object_path):
            raise ObjectNotFoundError(src_object_path)

        # Copying an object onto itself leaves it untouched
        if normalize_object_path(src_object_path) == normalize_object_path(dst_object_path):
            return

        visibility = ObjectVisibility.PRIVATE
        if self.preserve_visibility_on_copy:
            visibility = self.get_visibility(src_object_path)

        with self.read(src_object_path) as source:
            self.put(dst_object_path, source, visibility)

    def url(self, object_path: str) -> str:
        """Public URL; the object must be in the public tree"""
        if not object_path:
            return ""

        normalized = normalize_object_path(object_path)
        if not normalized or not self._public_path(normalized).is_file():
            raise ObjectNotFoundError(object_path, message="Public object not found")

        parts = urlsplit(self.public_base_url)
        url_path = posixpath.join(parts.path or "/", quote(normalized))
        return urlunsplit((parts.scheme, parts.netloc, url_path, parts.query, parts.fragment))

    def temporary_url(self, object_path: str, expire_in: timedelta) -> str:
        """
        Signed URL from the configured builder

        Only offered for objects that are already public.
        """
        if not object_path:
            return ""

        normalized = normalize_object_path(object_path)
        public_path = self._public_path(normalized)
        if not normalized or not public_path.is_file():
            raise ObjectNotFoundError(object_path, message="Public object not found")

        return self.signed_url_builder.build(public_path, normalized, expire_in)

    def _stat_file(self, object_path: str) -> os.stat_result:
        file_path = self._private_path(object_path)
        with _os_errors(object_path):
            if file_path.is_dir():
                raise IsADirectoryError(str(file_path))
            return file_path.stat()

    def size(self, object_path: str) -> int:
        return self._stat_file(object_path).st_size

    def last_modified(self, object_path: str) -> datetime:
        return datetime.fromtimestamp(self._stat_file(object_path).st_mtime, tz=timezone.utc)

    def exists(self, object_path: str) -> bool:
        return self._private_path(object_path).is_file()

    def set_visibility(self, object_path: str, visibility: Union[ObjectVisibility, str]):
        visibility = ObjectVisibility.parse(visibility, object_path)
        if not self.exists(object_path):
            raise ObjectNotFoundError(object_path)

        with _os_errors(object_path):
            if not visibility.is_public:
                self._unpublish(object_path)
            elif not self._public_path(object_path).is_file():
                self._publish(object_path)

    def get_visibility(self, object_path: str) -> ObjectVisibility:
        """
        Public if the public tree has the object, private if only the private
        tree has it. The filesystem cannot tell public-read from
        public-read-write, so public objects report public-read.
        """
        if self._public_path(object_path).is_file():
            return ObjectVisibility.PUBLIC_READ
        if self._private_path(object_path).is_file():
            return ObjectVisibility.PRIVATE
        raise ObjectNotFoundError(object_path)
