import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from referee.errors import MaxArmiesReached, NoArmiesToRaise, NoTargetTerritory
from referee.models.action_log import ActionType
from referee.services.actions import ActionResult, GameContext, RaiseAction
from referee.services.holding_service import (
    get_player_army_size,
    set_holding_army_size,
    validate_user,
)

logger = logging.getLogger(__name__)


@dataclass
class RaiseResult(ActionResult):
    territory: str
    army_size: int
    action_type = ActionType.raise_army

    def __str__(self) -> str:
        return f"{self.player} raised an army in {self.territory}"


async def execute_raise(db: AsyncSession, ctx: GameContext, action: RaiseAction) -> RaiseResult:
    """Add one army to a territory the player already holds."""
    await validate_user(db, action.player)
    if not action.territory:
        raise NoTargetTerritory()
    territory = ctx.directory.resolve(action.territory)
    cap = ctx.config.max_armies_per_territory

    army_size = await get_player_army_size(db, territory.abbreviation, action.player)
    if army_size is None:
        raise NoArmiesToRaise(
            f"no armies in {territory.name} controlled by {action.player} to raise"
        )
    if army_size >= cap:
        raise MaxArmiesReached(
            f"cannot raise army size in {territory.name}: already at maximum of {cap}"
        )

    await set_holding_army_size(db, territory.abbreviation, army_size + 1, False)
    return RaiseResult(player=action.player, territory=territory.name, army_size=army_size + 1)
