"""
Repository layer.

    from constraint_validations.repositories import BaseRepository
"""

from .base_repository import BaseRepository

__all__ = [
    "BaseRepository",
]
