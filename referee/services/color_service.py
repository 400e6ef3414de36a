import logging
import re
from dataclasses import dataclass

from PIL import ImageColor
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import atomic, is_unique_violation
from referee.errors import ColorInUse, InvalidColor
from referee.models.action_log import ActionType
from referee.models.nation import Nation
from referee.services.actions import ActionResult, ColorAction, GameContext
from referee.services.holding_service import validate_user
from referee.services.join_service import random_color

logger = logging.getLogger(__name__)

_BARE_HEX = re.compile(r"[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8}")


@dataclass
class ColorResult(ActionResult):
    color: str
    action_type = ActionType.color

    def __str__(self) -> str:
        return f"{self.player} changed their color to #{self.color}"


def normalize_color(expression: str) -> str:
    """Parse a CSS color expression into six lowercase hex digits.

    Accepts names ("white"), hex with or without '#', and rgb()/rgba()/hsl()
    functions. Any alpha component is dropped: nation colors are opaque.
    """
    text = expression.strip()
    if _BARE_HEX.fullmatch(text):
        text = "#" + text
    try:
        rgb = ImageColor.getrgb(text)
    except ValueError as exc:
        raise InvalidColor(f"unable to parse color {expression!r}") from exc
    return "".join(f"{min(max(channel, 0), 255):02x}" for channel in rgb[:3])


async def execute_color(db: AsyncSession, ctx: GameContext, action: ColorAction) -> ColorResult:
    await validate_user(db, action.player)
    if action.color:
        color = normalize_color(action.color)
    else:
        color = random_color(ctx.color_rng)

    async with atomic(db):
        try:
            await db.execute(
                update(Nation).where(Nation.player == action.player).values(color=color)
            )
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ColorInUse() from exc
            raise

    logger.info("Updated color of %s to %s", action.player, color)
    return ColorResult(player=action.player, color=color)
