"""Action log written after each committed action.

The turn scheduler reads these rows to count actions per nation and turn.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referee.models.action_log import ActionLogEntry, ActionType
from referee.models.nation import Nation


async def record_action(
    db: AsyncSession, player: str, action_type: ActionType, is_new_turn: bool = False
) -> ActionLogEntry:
    """Append a log row for ``player``; the nation may already be gone."""
    result = await db.execute(select(Nation.id).where(Nation.player == player))
    entry = ActionLogEntry(
        nation_id=result.scalar_one_or_none(),
        action_type=action_type,
        is_new_turn=is_new_turn,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def get_action_log(db: AsyncSession) -> list[ActionLogEntry]:
    result = await db.execute(select(ActionLogEntry).order_by(ActionLogEntry.id))
    return list(result.scalars().all())
