"""
Pytest configuration and shared fixtures for objectstore tests

Provides:
- Local storage rooted in a per-test temporary directory
- Mock boto3 S3 client and an S3Storage bound to it
- Sample content and ACL grant payloads
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from objectstore.storage.local import LocalStorage
from objectstore.storage.s3 import S3Storage
from objectstore.storage.visibility import ALL_USERS_URI

SAMPLE_CONTENT = "Hello, this is file content 😊 😅"


@pytest.fixture
def sample_content() -> str:
    """Non-ASCII sample payload"""
    return SAMPLE_CONTENT


@pytest.fixture
def local_storage(tmp_path) -> LocalStorage:
    """LocalStorage with private/public trees under tmp_path"""
    return LocalStorage(
        base_dir=tmp_path / "private",
        public_base_dir=tmp_path / "public",
        public_base_url="http://localhost:8000/files",
    )


@pytest.fixture
def mock_s3_client():
    """Mock boto3 S3 client"""
    mock = MagicMock()
    mock.put_object.return_value = {}
    mock.delete_object.return_value = {}
    mock.delete_objects.return_value = {"Deleted": []}
    mock.copy_object.return_value = {}
    mock.put_object_acl.return_value = {}
    mock.head_object.return_value = {
        "ContentLength": 37,
        "LastModified": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    }
    mock.generate_presigned_url.return_value = (
        "https://bucket.s3.us-east-1.amazonaws.com/key?X-Amz-Signature=abc"
    )
    return mock


@pytest.fixture
def s3_storage(mock_s3_client) -> S3Storage:
    """S3Storage bound to the mock client"""
    return S3Storage(
        bucket_name="my-bucket",
        endpoint_url="https://oss-cn-hangzhou.aliyuncs.com",
        client=mock_s3_client,
    )


def _owner_grant():
    return {
        "Grantee": {"Type": "CanonicalUser", "ID": "owner-id"},
        "Permission": "FULL_CONTROL",
    }


def _all_users_grant(permission):
    return {
        "Grantee": {"Type": "Group", "URI": ALL_USERS_URI},
        "Permission": permission,
    }


@pytest.fixture
def acl_grants():
    """Grant lists as returned by get_object_acl for each canned ACL"""
    return {
        "private": [_owner_grant()],
        "public-read": [_owner_grant(), _all_users_grant("READ")],
        "public-read-write": [
            _owner_grant(),
            _all_users_grant("READ"),
            _all_users_grant("WRITE"),
        ],
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
