"""
Signed URL builders for local storage

LocalStorage.temporary_url() hands URL construction to a SignedURLBuilder.
Without a configured builder the UnsupportedSignedURLBuilder null object is
used, which always raises UnsupportedError.

SECURITY: Never log the signing secret or full signed URLs.
"""

import hashlib
import hmac
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import quote, urlencode

from objectstore.core.exceptions import UnsupportedError


@runtime_checkable
class SignedURLBuilder(Protocol):
    def build(self, absolute_file_path: Path, object_path: str, expire_in: timedelta) -> str:
        ...


class UnsupportedSignedURLBuilder:
    """Null builder used when no signing capability is configured"""

    def build(self, absolute_file_path: Path, object_path: str, expire_in: timedelta) -> str:
        raise UnsupportedError("Signed URL builder is not configured", object_path=object_path)


def compute_url_signature(secret: str, object_path: str, expires: int) -> str:
    """
    HMAC-SHA256 over the canonical string "{object_path}.{expires}"

    Args:
        secret: Shared secret
        object_path: Normalized object path
        expires: Unix timestamp (seconds) after which the URL is invalid

    Returns:
        str: Hex digest
    """
    canonical = f"{object_path}.{expires}".encode("utf-8")
    return hmac.new(
        key=secret.encode("utf-8"),
        msg=canonical,
        digestmod=hashlib.sha256,
    ).hexdigest()


class HMACSignedURLBuilder:
    """
    Builds {base_url}/{object_path}?expires=...&signature=... links

    The serving side verifies a link with verify() using the same secret.
    """

    def __init__(self, base_url: str, secret: str):
        if not secret:
            raise ValueError("HMACSignedURLBuilder requires a non-empty secret")
        self.base_url = base_url.rstrip("/")
        self._secret = secret

    def build(self, absolute_file_path: Path, object_path: str, expire_in: timedelta) -> str:
        expires = int(time.time() + expire_in.total_seconds())
        signature = compute_url_signature(self._secret, object_path, expires)
        query = urlencode({"expires": expires, "signature": signature})
        return f"{self.base_url}/{quote(object_path)}?{query}"

    def verify(
        self,
        object_path: str,
        expires: int,
        signature: str,
        now: Optional[float] = None
    ) -> bool:
        """Check a signature in constant time and reject expired links"""
        now = time.time() if now is None else now
        if int(expires) < now:
            return False

        computed = compute_url_signature(self._secret, object_path, int(expires))
        return hmac.compare_digest(computed, signature)
