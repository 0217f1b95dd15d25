"""
Storage backend factory
Creates appropriate storage backend based on configuration
"""

import logging
from typing import Optional

from objectstore.config import Settings, settings as default_settings
from objectstore.core.exceptions import StorageConfigurationError
from objectstore.storage.base import StorageBackend
from objectstore.storage.local import LocalStorage
from objectstore.storage.s3 import S3Storage
from objectstore.storage.signing import HMACSignedURLBuilder

logger = logging.getLogger(__name__)


def get_storage_backend(settings: Optional[Settings] = None) -> StorageBackend:
    """
    Create a new storage backend from configuration

    Args:
        settings: Settings to use (defaults to the environment snapshot)

    Returns:
        StorageBackend: Configured storage backend (LocalStorage or S3Storage)

    Raises:
        StorageConfigurationError: If STORAGE_BACKEND is not "local" or "s3",
            or the backend cannot be built
    """
    settings = settings or default_settings
    backend_type = settings.STORAGE_BACKEND.lower()

    if backend_type == "local":
        logger.info(
            f"Using local file storage: private={settings.LOCAL_PRIVATE_DIR}, "
            f"public={settings.LOCAL_PUBLIC_DIR}"
        )

        signed_url_builder = None
        if settings.SIGNED_URL_SECRET:
            signed_url_builder = HMACSignedURLBuilder(
                base_url=settings.SIGNED_URL_BASE_URL or settings.LOCAL_PUBLIC_BASE_URL,
                secret=settings.SIGNED_URL_SECRET,
            )

        return LocalStorage(
            base_dir=settings.LOCAL_PRIVATE_DIR,
            public_base_dir=settings.LOCAL_PUBLIC_DIR,
            public_base_url=settings.LOCAL_PUBLIC_BASE_URL,
            signed_url_builder=signed_url_builder,
            preserve_visibility_on_copy=settings.PRESERVE_VISIBILITY_ON_COPY,
        )

    elif backend_type == "s3":
        logger.info(f"Using S3 storage: bucket={settings.S3_BUCKET_NAME}, region={settings.S3_REGION}")

        return S3Storage(
            bucket_name=settings.S3_BUCKET_NAME,
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION,
            max_attempts=settings.S3_MAX_ATTEMPTS,
            preserve_visibility_on_copy=settings.PRESERVE_VISIBILITY_ON_COPY,
        )

    else:
        raise StorageConfigurationError(
            f"Invalid STORAGE_BACKEND: {backend_type}. Must be 'local' or 's3'"
        )
