"""
Pydantic schemas
"""

from objectstore.schemas.storage import ObjectInfo

__all__ = ["ObjectInfo"]
