from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from constraint_validations.database.base import Base
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .album import Album


class Artist(Base):
    """
    An artist. Albums reference artists by id without ON UPDATE CASCADE, so changing
    the id of an artist that has albums violates the albums' foreign key.
    """
    __tablename__ = "artists"
    __table_args__ = (
        CheckConstraint("name <> ''", name="name_not_blank"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Unique and required
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    albums: Mapped[list["Album"]] = relationship("Album", back_populates="artist")

    def __repr__(self) -> str:
        return f"<Artist(id={self.id!r}, name={self.name!r})>"
