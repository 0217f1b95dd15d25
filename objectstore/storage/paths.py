"""
Object path helpers shared by all backends
"""

import posixpath
from pathlib import Path

from objectstore.core.exceptions import PathTraversalError


def normalize_object_path(object_path: str) -> str:
    """
    Clean an object path into forward-slash form relative to the root

    "a\\b//c/./d" -> "a/b/c/d", "/x/../y" -> "y", "" and "/" -> "",
    "../x" -> PathTraversalError

    Raises:
        PathTraversalError: If the cleaned path still climbs above the root
    """
    if "\x00" in object_path:
        raise PathTraversalError(object_path)

    # Windows uploads may carry backslashes
    cleaned = posixpath.normpath(object_path.replace("\\", "/"))
    if cleaned == ".":
        return ""
    # Leading slashes mean "from the root", never an absolute filesystem path
    cleaned = cleaned.lstrip("/")

    if cleaned == ".." or cleaned.startswith("../"):
        raise PathTraversalError(object_path)
    return cleaned


def safe_join(root: Path, object_path: str) -> Path:
    """Join a normalized object path onto a filesystem root"""
    normalized = normalize_object_path(object_path)
    if not normalized:
        return root
    return root.joinpath(*normalized.split("/"))
