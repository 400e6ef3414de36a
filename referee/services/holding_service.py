"""Holding ledger and player validation.

This is the only place army sizes are written. It keeps two rules true
inside one transaction: a holding whose armies reach zero is deleted, and
(optionally) a nation whose last holding is deleted is deleted with it.
"""

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import atomic
from referee.errors import MissingUser, NoDefendingNation, UserNotRegistered
from referee.models.holding import Holding
from referee.models.nation import Nation
from referee.models.nation_holdings import nation_holdings

logger = logging.getLogger(__name__)


async def validate_user(db: AsyncSession, player: str) -> None:
    """Raise unless ``player`` owns a nation in the game."""
    if not player:
        raise MissingUser()
    result = await db.execute(select(Nation.country_name).where(Nation.player == player))
    if result.scalar_one_or_none() is None:
        raise UserNotRegistered()


async def get_territory_holding(db: AsyncSession, territory: str) -> Row | None:
    """Return the view row for ``territory`` (owner, nation and army size), or None."""
    result = await db.execute(
        select(nation_holdings).where(nation_holdings.c.territory == territory)
    )
    return result.one_or_none()


async def get_player_army_size(db: AsyncSession, territory: str, player: str) -> int | None:
    result = await db.execute(
        select(nation_holdings.c.army_size).where(
            nation_holdings.c.territory == territory,
            nation_holdings.c.player == player,
        )
    )
    return result.scalar_one_or_none()


async def get_all_holdings(db: AsyncSession) -> list[Row]:
    result = await db.execute(
        select(nation_holdings).order_by(nation_holdings.c.player, nation_holdings.c.territory)
    )
    return list(result.all())


async def holdings_count(db: AsyncSession, player: str) -> int:
    """Number of territories currently held by ``player``."""
    result = await db.execute(
        select(func.count()).select_from(nation_holdings).where(nation_holdings.c.player == player)
    )
    return result.scalar_one()


async def _apply_army_size(
    db: AsyncSession, territory: str, size: int, cascade_nation_deletion: bool
) -> bool:
    holding = await get_territory_holding(db, territory)
    if holding is None:
        raise NoDefendingNation(territory)

    if size > 0:
        await db.execute(
            update(Holding).where(Holding.territory == territory).values(army_size=size)
        )
        return False

    await db.execute(delete(Holding).where(Holding.territory == territory))
    if not cascade_nation_deletion:
        return False

    if await holdings_count(db, holding.player) > 0:
        return False
    await db.execute(delete(Nation).where(Nation.id == holding.nation_id))
    logger.info("Player %s has no territories left, nation removed from play", holding.player)
    return True


async def set_holding_army_size(
    db: AsyncSession,
    territory: str,
    size: int,
    cascade_nation_deletion: bool,
    commit: bool = True,
) -> bool:
    """Set the army size in ``territory``; a size <= 0 deletes the holding.

    With ``cascade_nation_deletion`` the owner's nation is deleted when that
    was its last holding. Returns True when a nation was removed.

    ``commit=False`` runs inside the caller's open transaction; otherwise the
    change is committed (or rolled back) on its own.
    """
    if not commit:
        return await _apply_army_size(db, territory, size, cascade_nation_deletion)
    async with atomic(db):
        return await _apply_army_size(db, territory, size, cascade_nation_deletion)
