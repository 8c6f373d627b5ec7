"""
Service layer package.

Each module encapsulates domain logic independent of Flask or HTTP concerns.
"""

__all__ = [
    "entries_service",
    "entry_validator",
]
