"""Direct attacks between neighboring territories.

An attack only wears armies down: whichever side loses has its holding
reduced, and a holding reduced to zero is deleted (leaving the territory
unclaimed, never captured). A nation losing its last holding is removed.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import atomic
from referee.errors import (
    CounterattackNotImplemented,
    FriendlyFireNotAllowed,
    NoAttackingArmies,
    NoDefendingArmies,
    NotNeighboring,
)
from referee.models.action_log import ActionType
from referee.services.actions import ActionResult, AttackAction, GameContext
from referee.services.combat_service import resolve_combat
from referee.services.holding_service import (
    get_player_army_size,
    get_territory_holding,
    set_holding_army_size,
    validate_user,
)

logger = logging.getLogger(__name__)


@dataclass
class AttackResult(ActionResult):
    attacking_territory: str
    defending_territory: str
    defender: str
    die_roll: int
    attacking: int
    defending: int
    losses: int
    nation_removed: bool = False
    eliminated_player: str | None = None
    action_type = ActionType.attack

    def __str__(self) -> str:
        prefix = (
            f"{self.player} attacked {self.defending_territory} "
            f"from {self.attacking_territory}"
        )
        if self.losses == 0:
            text = f"{prefix}, attack failed (rolled {self.die_roll}) and no armies were lost"
        elif self.losses > 0:
            text = (
                f"{prefix}, attack succeeded (rolled {self.die_roll}) "
                f"and {self.losses} defending armies were lost"
            )
        else:
            text = (
                f"{prefix}, attack failed (rolled {self.die_roll}) "
                f"and {-self.losses} attacking armies were lost"
            )
        if self.eliminated_player:
            text += f"; {self.eliminated_player} has no territories left"
        return text


async def execute_attack(db: AsyncSession, ctx: GameContext, action: AttackAction) -> AttackResult:
    await validate_user(db, action.player)
    attacking_territory = ctx.directory.resolve(action.attacking)
    defending_territory = ctx.directory.resolve(action.defending)

    if attacking_territory.abbreviation == defending_territory.abbreviation:
        raise FriendlyFireNotAllowed(
            f"cannot attack {defending_territory.name} from {attacking_territory.name}: "
            "friendly fire not allowed"
        )
    if not ctx.directory.is_neighboring(attacking_territory, defending_territory):
        raise NotNeighboring(
            f"cannot attack {defending_territory.name} from {attacking_territory.name}: "
            "not a neighboring territory"
        )

    attacking = await get_player_army_size(db, attacking_territory.abbreviation, action.player)
    if not attacking:
        raise NoAttackingArmies(
            f"no armies in {attacking_territory.name} controlled by {action.player} to attack with"
        )
    defender = await get_territory_holding(db, defending_territory.abbreviation)
    if defender is None:
        raise NoDefendingArmies(f"no armies in {defending_territory.name}")

    if ctx.config.do_counterattack:
        # TODO: defender counterattack using the Advance Wars damage formula
        raise CounterattackNotImplemented()

    outcome = resolve_combat(attacking, defender.army_size, ctx.rng)
    nation_removed = False
    eliminated_player = None
    async with atomic(db):
        if outcome.losses > 0:
            nation_removed = await set_holding_army_size(
                db,
                defending_territory.abbreviation,
                defender.army_size - outcome.defender_losses,
                True,
                commit=False,
            )
            if nation_removed:
                eliminated_player = defender.player
        elif outcome.losses < 0:
            nation_removed = await set_holding_army_size(
                db,
                attacking_territory.abbreviation,
                attacking - outcome.attacker_losses,
                True,
                commit=False,
            )
            if nation_removed:
                eliminated_player = action.player

    result = AttackResult(
        player=action.player,
        attacking_territory=attacking_territory.name,
        defending_territory=defending_territory.name,
        defender=defender.player,
        die_roll=outcome.die_roll,
        attacking=attacking,
        defending=defender.army_size,
        losses=outcome.losses,
        nation_removed=nation_removed,
        eliminated_player=eliminated_player,
    )
    logger.info("%s", result)
    return result
