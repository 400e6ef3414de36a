from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from referee.models.base import Base


class Holding(Base):
    """One nation's armies in one territory.

    A territory has at most one holding. A holding never has zero armies:
    reaching zero deletes the row.
    """

    __tablename__ = "holdings"
    __table_args__ = (CheckConstraint("army_size > 0", name="army_size_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    territory: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nation_id: Mapped[int] = mapped_column(
        ForeignKey("nations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    army_size: Mapped[int] = mapped_column(Integer, nullable=False)
