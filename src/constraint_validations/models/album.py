from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from constraint_validations.database.base import Base
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .artist import Artist


class Album(Base):
    """
    An album by an artist.

    Constraints:
      - artist_id references artists.id
      - (artist_id, name) is unique
      - release_year, when present, is after 1900
    """
    __tablename__ = "albums"
    __table_args__ = (
        UniqueConstraint("artist_id", "name"),
        CheckConstraint("release_year > 1900", name="release_year_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    artist_id: Mapped[int] = mapped_column(ForeignKey("artists.id"), nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    release_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    artist: Mapped["Artist"] = relationship("Artist", back_populates="albums")

    def __repr__(self) -> str:
        return f"<Album(id={self.id!r}, artist_id={self.artist_id!r}, name={self.name!r})>"
