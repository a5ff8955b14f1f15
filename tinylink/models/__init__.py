"""
Database models for TinyLink.

Only the SQL backend uses these; the Redis and in-memory backends keep
the same fields in their own layout.
"""

from .link import Link

__all__ = ["Link"]
