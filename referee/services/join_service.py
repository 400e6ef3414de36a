import logging
import random
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import atomic, is_unique_violation, violated_unique_column
from referee.errors import (
    ColorInUse,
    MissingUser,
    NationAlreadyJoined,
    NoTargetTerritory,
    PlayerAlreadyJoined,
    TerritoryAlreadyOccupied,
)
from referee.models.action_log import ActionType
from referee.models.holding import Holding
from referee.models.nation import Nation
from referee.services.actions import ActionResult, GameContext, JoinAction

logger = logging.getLogger(__name__)

MAX_COLOR_ATTEMPTS = 16

_NATION_UNIQUE_COLUMNS = ("player", "country_name", "color")


@dataclass
class JoinResult(ActionResult):
    nation: str
    territory: str
    color: str
    army_size: int
    action_type = ActionType.join

    def __str__(self) -> str:
        return f"{self.nation} founded by {self.player} in {self.territory}"


def random_color(rng: random.Random | None = None) -> str:
    _rand = rng or random
    return "".join(f"{_rand.randint(0, 255):02x}" for _ in range(3))


async def _unused_color(db: AsyncSession, rng: random.Random) -> str:
    result = await db.execute(select(Nation.color))
    taken = set(result.scalars().all())
    for _ in range(MAX_COLOR_ATTEMPTS):
        color = random_color(rng)
        if color not in taken:
            return color
    # Give up on randomness and walk the color space
    return next(f"{n:06x}" for n in range(0x1000000) if f"{n:06x}" not in taken)


async def execute_join(db: AsyncSession, ctx: GameContext, action: JoinAction) -> JoinResult:
    """Found a new nation for ``action.player`` with one holding in the target territory."""
    if not action.player:
        raise MissingUser()
    if not action.territory:
        raise NoTargetTerritory()
    nation_name = action.nation or f"{action.player}'s Nation"
    territory = ctx.directory.resolve(action.territory)

    result = await db.execute(
        select(func.count()).select_from(Nation).where(Nation.player == action.player)
    )
    if result.scalar_one() > 0:
        raise PlayerAlreadyJoined()
    result = await db.execute(
        select(func.count()).select_from(Nation).where(Nation.country_name == nation_name)
    )
    if result.scalar_one() > 0:
        raise NationAlreadyJoined()

    async with atomic(db):
        color = await _unused_color(db, ctx.color_rng)
        nation = Nation(country_name=nation_name, player=action.player, color=color)
        db.add(nation)
        try:
            await db.flush()
        except IntegrityError as exc:
            column = violated_unique_column(exc, _NATION_UNIQUE_COLUMNS)
            if column == "player":
                raise PlayerAlreadyJoined() from exc
            if column == "country_name":
                raise NationAlreadyJoined() from exc
            if column == "color":
                raise ColorInUse() from exc
            raise

        db.add(
            Holding(
                territory=territory.abbreviation,
                nation_id=nation.id,
                army_size=ctx.config.initial_armies,
            )
        )
        try:
            await db.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise TerritoryAlreadyOccupied(
                    f"{territory.name} is already occupied"
                ) from exc
            raise

    logger.info("Added new player %s (%s) in %s", action.player, nation_name, territory.name)
    return JoinResult(
        player=action.player,
        nation=nation_name,
        territory=territory.name,
        color=color,
        army_size=ctx.config.initial_armies,
    )
