"""Movement of armies between neighboring territories.

Movement rules:
- The source must be held by the moving player with at least the requested
  number of armies; no count (or 0) moves every army in the source.
- The destination must be a neighbor, and must be unclaimed or already held
  by the same player. The resulting army may not exceed the per-territory cap.
- When unclaimed territories have a garrison, moving into one is an invasion:
  the moving army fights a phantom army of 1 and arrives minus its losses.
  An invasion that loses every moving army gains no territory.
- The source always loses the full moving army, and emptying the last
  holding of a nation eliminates it.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import atomic, is_unique_violation
from referee.errors import (
    InsufficientArmies,
    MaxArmiesReached,
    NoArmiesToMove,
    NoTargetTerritory,
    NotNeighboring,
    TerritoryAlreadyOccupied,
)
from referee.models.action_log import ActionType
from referee.models.holding import Holding
from referee.services.actions import ActionResult, GameContext, MoveAction
from referee.services.combat_service import GARRISON_SIZE, resolve_combat
from referee.services.holding_service import (
    get_territory_holding,
    set_holding_army_size,
    validate_user,
)

logger = logging.getLogger(__name__)


@dataclass
class MoveResult(ActionResult):
    source: str
    destination: str
    armies: int
    arrived: int
    move_all: bool = False
    die_roll: int | None = None
    nation_removed: bool = False
    action_type = ActionType.move

    @property
    def invasion_failed(self) -> bool:
        return self.arrived <= 0

    def __str__(self) -> str:
        if self.invasion_failed:
            text = (
                f"{self.player} failed to invade {self.destination} from {self.source} "
                f"(rolled {self.die_roll}) and lost {self.armies} armies"
            )
            if self.nation_removed:
                text += f", {self.player} has no territories left"
            return text
        if self.move_all:
            text = f"{self.player} moved all armies from {self.source} to {self.destination}"
        else:
            text = f"{self.player} moved {self.armies} armies from {self.source} to {self.destination}"
        if self.arrived < self.armies:
            text += f", {self.armies - self.arrived} lost invading (rolled {self.die_roll})"
        return text


async def execute_move(db: AsyncSession, ctx: GameContext, action: MoveAction) -> MoveResult:
    await validate_user(db, action.player)
    if not action.destination or action.source == action.destination:
        raise NoTargetTerritory()

    source = ctx.directory.resolve(action.source)
    destination = ctx.directory.resolve(action.destination)
    if source.abbreviation == destination.abbreviation:
        raise NoTargetTerritory("source and destination territories must differ")
    if not ctx.directory.is_neighboring(source, destination):
        raise NotNeighboring(
            f"cannot move from {source.name} to {destination.name}: not a neighboring territory"
        )

    from_holding = await get_territory_holding(db, source.abbreviation)
    if from_holding is None or from_holding.player != action.player:
        raise NoArmiesToMove(
            f"no armies in {source.name} controlled by {action.player} to move"
        )
    available = from_holding.army_size
    if action.armies > available:
        raise InsufficientArmies(
            f"cannot move {action.armies} armies from {source.name}: only {available} available"
        )
    moving = action.armies if action.armies > 0 else available

    to_holding = await get_territory_holding(db, destination.abbreviation)
    if to_holding is not None and to_holding.player != action.player:
        raise TerritoryAlreadyOccupied(
            f"{destination.name} is already occupied by {to_holding.country_name}"
        )
    destination_size = to_holding.army_size if to_holding is not None else 0
    cap = ctx.config.max_armies_per_territory
    if destination_size + moving > cap:
        raise MaxArmiesReached(
            f"cannot move {moving} armies to {destination.name}: would exceed maximum of {cap}"
        )

    arrived = moving
    die_roll = None
    async with atomic(db):
        if to_holding is None and ctx.config.unclaimed_territories_have_garrison:
            outcome = resolve_combat(moving, GARRISON_SIZE, ctx.rng)
            die_roll = outcome.die_roll
            arrived = moving - outcome.attacker_losses

        # Destination first so the source's elimination check sees the new holding
        if arrived > 0 and to_holding is None:
            db.add(
                Holding(
                    territory=destination.abbreviation,
                    nation_id=from_holding.nation_id,
                    army_size=arrived,
                )
            )
            try:
                await db.flush()
            except IntegrityError as exc:
                if is_unique_violation(exc):
                    raise TerritoryAlreadyOccupied(
                        f"{destination.name} is already occupied"
                    ) from exc
                raise
        elif arrived > 0:
            await set_holding_army_size(
                db, destination.abbreviation, destination_size + arrived, False, commit=False
            )

        nation_removed = await set_holding_army_size(
            db, source.abbreviation, available - moving, True, commit=False
        )

    result = MoveResult(
        player=action.player,
        source=source.name,
        destination=destination.name,
        armies=moving,
        arrived=max(arrived, 0),
        move_all=action.armies <= 0,
        die_roll=die_roll,
        nation_removed=nation_removed,
    )
    logger.info("%s", result)
    return result
