"""
Pydantic Schemas for storage listings
"""

from pydantic import BaseModel, ConfigDict, Field


class ObjectInfo(BaseModel):
    """Single entry returned by StorageBackend.list()"""
    model_config = ConfigDict(frozen=True)

    object_path: str = Field(..., description="Path relative to the listed directory")
    is_dir: bool = Field(False, description="True for directory-like entries")
