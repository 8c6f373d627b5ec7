"""Repository package exposing all repository modules."""

from . import entries_repo, health_repo

__all__ = [
    "entries_repo",
    "health_repo",
]
