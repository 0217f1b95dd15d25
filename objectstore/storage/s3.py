"""
S3 object storage backend
Implements StorageBackend interface for AWS S3 (or compatible services such as
MinIO or Alibaba OSS) with visibility carried by canned object ACLs
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import BinaryIO, List, Optional, Union
from urllib.parse import quote, urlsplit

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from objectstore.core.exceptions import (
    ObjectNotFoundError,
    StorageConfigurationError,
    StorageError,
    UnderlyingStorageError,
)
from objectstore.schemas.storage import ObjectInfo
from objectstore.storage.base import PutSource, StorageBackend
from objectstore.storage.paths import normalize_object_path
from objectstore.storage.visibility import ObjectVisibility, from_grants, to_canned_acl

logger = logging.getLogger(__name__)

# Signed URLs never expire sooner than this
MIN_SIGNED_URL_EXPIRY = timedelta(hours=24)

# S3 accepts at most 1000 keys per DeleteObjects request
DELETE_BATCH_SIZE = 1000

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


@contextmanager
def _client_errors(object_path: str):
    """Translate botocore errors into storage errors"""
    try:
        yield
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
            raise ObjectNotFoundError(object_path) from e
        logger.error(f"S3 request failed for {object_path}: {e}")
        raise UnderlyingStorageError(str(e), object_path=object_path, cause=e) from e
    except BotoCoreError as e:
        logger.error(f"S3 request failed for {object_path}: {e}")
        raise UnderlyingStorageError(str(e), object_path=object_path, cause=e) from e


class S3Storage(StorageBackend):
    """S3 object storage with ACL-based visibility"""

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: Optional[str] = None,
        max_attempts: Optional[int] = None,
        client=None,
        preserve_visibility_on_copy: bool = False
    ):
        """
        Initialize S3 storage backend

        Args:
            bucket_name: S3 bucket name
            endpoint_url: Custom S3 endpoint (for MinIO, Alibaba OSS, etc.)
            aws_access_key_id: Access key (optional, uses env/IAM if not provided)
            aws_secret_access_key: Secret key (optional)
            region_name: Region (optional)
            max_attempts: botocore retry attempts (the SDK owns retries)
            client: Pre-built boto3 S3 client (skips client construction)
            preserve_visibility_on_copy: Copy source ACL to the destination

        Raises:
            StorageConfigurationError: If the client cannot be built
        """
        if not bucket_name:
            raise StorageConfigurationError("S3 bucket name is required")

        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url or None
        self.region_name = region_name or None
        self.preserve_visibility_on_copy = preserve_visibility_on_copy

        if client is None:
            client = self._build_client(
                aws_access_key_id, aws_secret_access_key, max_attempts
            )
        self.s3_client = client

        self.endpoint_host = self._endpoint_host()
        logger.info(f"S3 storage ready: bucket={self.bucket_name}, endpoint={self.endpoint_host}")

    def _build_client(
        self,
        aws_access_key_id: Optional[str],
        aws_secret_access_key: Optional[str],
        max_attempts: Optional[int]
    ):
        # Only pass non-empty values so boto3 can fall back to env/IAM
        s3_config = {}
        if aws_access_key_id:
            s3_config['aws_access_key_id'] = aws_access_key_id
        if aws_secret_access_key:
            s3_config['aws_secret_access_key'] = aws_secret_access_key
        if self.region_name:
            s3_config['region_name'] = self.region_name
        if self.endpoint_url:
            s3_config['endpoint_url'] = self.endpoint_url
        if max_attempts:
            s3_config['config'] = Config(retries={'max_attempts': max_attempts, 'mode': 'standard'})

        try:
            return boto3.client('s3', **s3_config)
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Cannot build S3 client for bucket {self.bucket_name}: {e}")
            raise StorageConfigurationError(f"Cannot build S3 client: {e}") from e

    def _endpoint_host(self) -> str:
        """Host part used for public URLs"""
        if self.endpoint_url:
            parts = urlsplit(self.endpoint_url)
            return parts.netloc or parts.path.strip("/")
        return f"s3.{self.region_name or 'us-east-1'}.amazonaws.com"

    @property
    def backend_name(self) -> str:
        return "s3"

    def list(self, object_dir: str) -> List[ObjectInfo]:
        """
        List one level under object_dir using "/" as delimiter

        Returns an empty list for prefixes with no keys.
        """
        normalized = normalize_object_path(object_dir)
        prefix = f"{normalized}/" if normalized else ""
        result = []

        with _client_errors(object_dir):
            paginator = self.s3_client.get_paginator('list_objects_v2')
            pages = paginator.paginate(Bucket=self.bucket_name, Prefix=prefix, Delimiter='/')

            for page in pages:
                for common_prefix in page.get('CommonPrefixes', []):
                    name = common_prefix['Prefix'][len(prefix):].rstrip('/')
                    if name:
                        result.append(ObjectInfo(object_path=name, is_dir=True))
                for obj in page.get('Contents', []):
                    name = obj['Key'][len(prefix):]
                    # Skip the directory placeholder key itself
                    if name:
                        result.append(ObjectInfo(object_path=name, is_dir=False))

        return sorted(result, key=lambda info: info.object_path)

    def read(self, object_path: str) -> BinaryIO:
        """Return the streaming body; caller must close it"""
        key = normalize_object_path(object_path)
        with _client_errors(object_path):
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
        return response['Body']

    def put(
        self,
        object_path: str,
        source: PutSource,
        visibility: Union[ObjectVisibility, str] = ObjectVisibility.PRIVATE
    ):
        """Upload body and ACL in a single PutObject request"""
        acl = to_canned_acl(visibility, object_path)
        key = normalize_object_path(object_path)
        if not key:
            raise StorageError("Object path is empty", object_path=object_path)

        if isinstance(source, str):
            body = source.encode("utf-8")
        else:
            body = source

        with _client_errors(object_path):
            self.s3_client.put_object(Bucket=self.bucket_name, Key=key, Body=body, ACL=acl)
        logger.info(f"Uploaded object to S3: {key} ({acl})")

    def delete(self, *object_paths: str):
        """DeleteObject for one path, batched DeleteObjects for several"""
        keys = [normalize_object_path(p) for p in object_paths]
        keys = [k for k in keys if k]
        if not keys:
            return

        if len(keys) == 1:
            with _client_errors(keys[0]):
                self.s3_client.delete_object(Bucket=self.bucket_name, Key=keys[0])
            logger.info(f"Deleted object from S3: {keys[0]}")
            return

        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[i:i + DELETE_BATCH_SIZE]
            with _client_errors(batch[0]):
                response = self.s3_client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={'Objects': [{'Key': k} for k in batch], 'Quiet': True}
                )

            errors = response.get('Errors', [])
            if errors:
                failed = ", ".join(err.get('Key', '?') for err in errors)
                logger.error(f"Failed to delete {len(errors)} objects from S3: {failed}")
                raise UnderlyingStorageError(f"Failed to delete objects: {failed}")

        logger.info(f"Deleted {len(keys)} objects from S3")

    def copy(self, src_object_path: str, dst_object_path: str):
        """
        Server-side copy

        The destination gets the bucket's default ACL unless
        preserve_visibility_on_copy is set.
        """
        src_key = normalize_object_path(src_object_path)
        dst_key = normalize_object_path(dst_object_path)

        extra_args = {}
        if self.preserve_visibility_on_copy:
            extra_args['ACL'] = to_canned_acl(self.get_visibility(src_object_path))

        with _client_errors(src_object_path):
            self.s3_client.copy_object(
                Bucket=self.bucket_name,
                Key=dst_key,
                CopySource={'Bucket': self.bucket_name, 'Key': src_key},
                **extra_args
            )

    def url(self, object_path: str) -> str:
        """
        Unsigned URL built from bucket and endpoint

        Existence and visibility are not checked.
        """
        if not object_path:
            return ""

        key = normalize_object_path(object_path)
        return f"https://{self.bucket_name}.{self.endpoint_host}/{quote(key)}"

    def temporary_url(self, object_path: str, expire_in: timedelta) -> str:
        """
        Pre-signed GET URL, valid for at least MIN_SIGNED_URL_EXPIRY

        Shorter expiries are raised to the floor without notice.
        """
        if not object_path:
            return ""

        expire_in = max(expire_in, MIN_SIGNED_URL_EXPIRY)
        key = normalize_object_path(object_path)

        with _client_errors(object_path):
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': key},
                ExpiresIn=int(expire_in.total_seconds())
            )

    def _head(self, object_path: str) -> dict:
        key = normalize_object_path(object_path)
        with _client_errors(object_path):
            return self.s3_client.head_object(Bucket=self.bucket_name, Key=key)

    def size(self, object_path: str) -> int:
        return int(self._head(object_path)['ContentLength'])

    def last_modified(self, object_path: str) -> datetime:
        return self._head(object_path)['LastModified']

    def exists(self, object_path: str) -> bool:
        """Check with HeadObject; directory placeholders are not objects"""
        key = normalize_object_path(object_path)
        if not key or object_path.endswith(("/", "\\")):
            return False

        try:
            self._head(object_path)
            return True
        except ObjectNotFoundError:
            return False

    def set_visibility(self, object_path: str, visibility: Union[ObjectVisibility, str]):
        acl = to_canned_acl(visibility, object_path)
        key = normalize_object_path(object_path)
        with _client_errors(object_path):
            self.s3_client.put_object_acl(Bucket=self.bucket_name, Key=key, ACL=acl)

    def get_visibility(self, object_path: str) -> ObjectVisibility:
        """
        Map the object's ACL grants back to a visibility

        Raises:
            UnknownACLError: If the grants match no canned ACL
        """
        key = normalize_object_path(object_path)
        with _client_errors(object_path):
            response = self.s3_client.get_object_acl(Bucket=self.bucket_name, Key=key)
        return from_grants(response.get('Grants', []), object_path=object_path)
