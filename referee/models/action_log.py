import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, false, func
from sqlalchemy.orm import Mapped, mapped_column

from referee.models.base import Base


class ActionType(str, enum.Enum):
    join = "join"
    color = "color"
    raise_army = "raise"
    move = "move"
    attack = "attack"


class ActionLogEntry(Base):
    """Audit row consumed by the turn scheduler.

    nation_id is nulled when the nation is eliminated, the row itself stays.
    """

    __tablename__ = "actions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    nation_id: Mapped[int | None] = mapped_column(
        ForeignKey("nations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action_type: Mapped[ActionType] = mapped_column(
        Enum(
            ActionType,
            native_enum=False,
            length=45,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    is_new_turn: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
