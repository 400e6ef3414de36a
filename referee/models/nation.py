from sqlalchemy import CHAR, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from referee.models.base import Base


class Nation(Base):
    """A player's faction. Removed as soon as it holds no territory."""

    __tablename__ = "nations"
    __table_args__ = (
        CheckConstraint("length(country_name) > 0", name="country_name_length"),
        CheckConstraint("length(player) > 0", name="player_length"),
        CheckConstraint("length(color) = 6", name="color_length"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    country_name: Mapped[str] = mapped_column(String(125), unique=True, nullable=False)
    player: Mapped[str] = mapped_column(String(90), unique=True, nullable=False)
    # six lowercase hex digits, no leading '#'
    color: Mapped[str] = mapped_column(CHAR(6), unique=True, nullable=False)
