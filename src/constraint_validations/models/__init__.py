"""
Models used with the repositories.

    from constraint_validations.models import Artist, Album
"""

from .artist import Artist
from .album import Album

__all__ = [
    "Artist",
    "Album",
]
