"""
Core Utilities

Modules:
    - exceptions: Storage error hierarchy
"""

from objectstore.core import exceptions

__all__ = ["exceptions"]
