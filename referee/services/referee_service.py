"""Single entry point for processing player actions.

``process_action`` dispatches an action value to its handler and returns
``(result, error)``: rule violations and store failures come back as values
so the caller decides whether to log, resubmit or tell the player.

``parse_action`` builds action values from positional string arguments,
e.g. ``parse_action("move", "alice", "2", "CA", "NV")``.
"""

import logging
import re
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from referee.errors import InvalidAction, MissingUser, RefereeError
from referee.services.actions import (
    Action,
    ActionResult,
    AttackAction,
    ColorAction,
    GameContext,
    JoinAction,
    MoveAction,
    RaiseAction,
)
from referee.services.attack_service import execute_attack
from referee.services.color_service import execute_color
from referee.services.join_service import execute_join
from referee.services.movement_service import execute_move
from referee.services.raise_service import execute_raise

logger = logging.getLogger(__name__)

Handler = Callable[[AsyncSession, GameContext, Action], Awaitable[ActionResult]]

_HANDLERS: dict[type, Handler] = {
    JoinAction: execute_join,
    ColorAction: execute_color,
    RaiseAction: execute_raise,
    MoveAction: execute_move,
    AttackAction: execute_attack,
}

_MOVE_COUNT_TOKEN = re.compile(r"move(\d+)")


async def process_action(
    action: Action, db: AsyncSession, ctx: GameContext
) -> tuple[ActionResult | None, Exception | None]:
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return None, InvalidAction(f"unsupported action {action!r}")

    try:
        result = await handler(db, ctx, action)
    except RefereeError as exc:
        await db.rollback()
        logger.warning("%s action by %r rejected: %s", action.action_type.value, action.player, exc)
        return None, exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("%s action by %r failed", action.action_type.value, action.player)
        return None, exc
    return result, None


# ---------------------------------------------------------------------------
# Argument parsers
# ---------------------------------------------------------------------------

def _require_user(args: tuple[str, ...]) -> str:
    if not args or not args[0]:
        raise MissingUser()
    return args[0]


def _parse_armies(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise InvalidAction(f"invalid number of armies: {value!r}") from None


def parse_join(*args: str) -> JoinAction:
    """``user territory`` or ``user nation territory`` (empty nation uses the default name)."""
    player = _require_user(args)
    if len(args) == 2:
        return JoinAction(player=player, territory=args[1])
    if len(args) == 3:
        return JoinAction(player=player, nation=args[1], territory=args[2])
    raise InvalidAction("join action requires a user, an optional nation name and a territory")


def parse_color(*args: str) -> ColorAction:
    player = _require_user(args)
    if len(args) != 2:
        raise InvalidAction("color action requires 2 arguments: user and color")
    return ColorAction(player=player, color=args[1])


def parse_raise(*args: str) -> RaiseAction:
    player = _require_user(args)
    if len(args) != 2:
        raise InvalidAction("raise action requires 2 arguments: user and territory")
    return RaiseAction(player=player, territory=args[1])


def parse_move(*args: str, armies: int = 0) -> MoveAction:
    """``user source destination`` or ``user count source destination``.

    The source may also carry the count as ``source:count``.
    """
    player = _require_user(args)
    if len(args) == 4:
        armies = _parse_armies(args[1])
        source, destination = args[2], args[3]
    elif len(args) == 3:
        source, destination = args[1], args[2]
        name, sep, count = source.rpartition(":")
        if sep and name:
            source, armies = name, _parse_armies(count)
    else:
        raise InvalidAction(
            "invalid move action format, expected 3 or 4 arguments: "
            "user, [armies,] source and destination"
        )
    return MoveAction(player=player, source=source, destination=destination, armies=armies)


def parse_attack(*args: str) -> AttackAction:
    player = _require_user(args)
    if len(args) != 3:
        raise InvalidAction("attack action requires 3 arguments: user, attacking and defending")
    return AttackAction(player=player, attacking=args[1], defending=args[2])


ACTION_PARSERS: dict[str, Callable[..., Action]] = {
    "join": parse_join,
    "color": parse_color,
    "raise": parse_raise,
    "move": parse_move,
    "attack": parse_attack,
}


def registered_actions() -> list[str]:
    return sorted(ACTION_PARSERS)


def parse_action(kind: str, *args: str) -> Action:
    """Build an action from its kind token and positional arguments.

    ``moveN`` is accepted as shorthand for moving N armies.
    """
    kind = kind.strip().lower()
    match = _MOVE_COUNT_TOKEN.fullmatch(kind)
    if match:
        return parse_move(*args, armies=int(match.group(1)))
    parser = ACTION_PARSERS.get(kind)
    if parser is None:
        raise InvalidAction(
            f"invalid action {kind!r}, valid actions are: {', '.join(registered_actions())}"
        )
    return parser(*args)
